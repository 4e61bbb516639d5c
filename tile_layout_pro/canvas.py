"""
Interactive canvas adapter.

Turns the current page of a LayoutSession into screen space items for a
drawing backend, and maps pointer positions back to cells for selection,
drag reorder, and file drops. Drawing itself is left to the backend.
"""

# Standard Library
import dataclasses
import pathlib

# local repo modules
import tile_layout_pro as tlp
import tile_layout_pro.config
import tile_layout_pro.geometry
import tile_layout_pro.layout_plan
import tile_layout_pro.model
import tile_layout_pro.session


CellContent = tlp.model.CellContent
LayoutSession = tlp.session.LayoutSession
PagePlan = tlp.layout_plan.PagePlan
Rect = tlp.geometry.Rect
TextItem = tlp.layout_plan.TextItem

MM_TO_POINTS = tlp.config.MM_TO_POINTS
DISPLAY_PIXELS_PER_MM = tlp.config.DISPLAY_PIXELS_PER_MM


@dataclasses.dataclass(frozen=True)
class ScreenText:
	text: str
	center_x: float
	top: float
	font_name: str
	font_size: float
	color: str


@dataclasses.dataclass(frozen=True)
class ScreenCell:
	index: int
	cell_id: str
	rect: Rect
	content: CellContent | None
	media_type: str = ""
	image_rect: Rect | None = None
	caption: ScreenText | None = None
	dashed_border: bool = False
	selected: bool = False
	drag_source: bool = False
	drop_target: bool = False


@dataclasses.dataclass(frozen=True)
class ScreenPage:
	width: float
	height: float
	cells: tuple[ScreenCell, ...]
	title: ScreenText | None = None
	page_number: ScreenText | None = None


class CanvasAdapter:
	"""
	Screen mapping and pointer handling for one session's current page.

	Screen coordinates are pixels with a top-left origin. Page points map to
	the screen through one uniform scale plus an offset.
	"""

	def __init__(self, session: LayoutSession, zoom: float | None = None):
		self.session = session
		if zoom is None:
			zoom = session.preferences.zoom
		self.scale = DISPLAY_PIXELS_PER_MM / MM_TO_POINTS * zoom
		self.offset_x = 0.0
		self.offset_y = 0.0
		self.drag_source: int | None = None
		self.drop_target: int | None = None

	#============================================
	def set_zoom(self, zoom: float) -> None:
		if zoom <= 0:
			raise ValueError(f"Zoom must be positive, got {zoom}")
		self.scale = DISPLAY_PIXELS_PER_MM / MM_TO_POINTS * zoom

	#============================================
	def fit_to_box(self, box_width: float, box_height: float) -> None:
		"""
		Scale and center the page inside a viewport.

		Args:
			box_width: Viewport width in pixels.
			box_height: Viewport height in pixels.
		"""
		width, height = tlp.geometry.page_size_points(self.session.document.page_size)
		self.scale = tlp.geometry.fit_scale(width, height, box_width, box_height)
		self.offset_x = (box_width - width * self.scale) / 2.0
		self.offset_y = (box_height - height * self.scale) / 2.0

	#============================================
	def to_page_point(self, x: float, y: float) -> tuple[float, float]:
		return ((x - self.offset_x) / self.scale, (y - self.offset_y) / self.scale)

	#============================================
	def to_screen_rect(self, rect: Rect) -> Rect:
		return tlp.geometry.scale_rect(rect, self.scale, self.offset_x, self.offset_y)

	#============================================
	def to_screen_text(self, item: TextItem | None) -> ScreenText | None:
		if item is None:
			return None
		return ScreenText(
			text=item.text,
			center_x=self.offset_x + item.center_x * self.scale,
			top=self.offset_y + item.top * self.scale,
			font_name=item.font_name,
			font_size=item.font_size * self.scale,
			color=item.color,
		)

	#============================================
	def page_plan(self) -> PagePlan:
		snapshot = self.session.document.snapshot()
		return tlp.layout_plan.build_page_plan(snapshot, self.session.current_page_index)

	#============================================
	def screen_page(self) -> ScreenPage:
		"""
		Build the screen space items for the current page.

		Returns:
			ScreenPage ready for a drawing backend.
		"""
		plan = self.page_plan()
		selected_id = self.session.selected_cell_id
		cells = []
		for cell in plan.cells:
			image_rect = None
			if cell.image_rect is not None:
				image_rect = self.to_screen_rect(cell.image_rect)
			cells.append(
				ScreenCell(
					index=cell.index,
					cell_id=cell.cell_id,
					rect=self.to_screen_rect(cell.rect),
					content=cell.content,
					media_type=cell.media_type,
					image_rect=image_rect,
					caption=self.to_screen_text(cell.caption),
					dashed_border=cell.dashed_border,
					selected=cell.cell_id == selected_id,
					drag_source=cell.index == self.drag_source,
					drop_target=cell.index == self.drop_target,
				)
			)
		return ScreenPage(
			width=plan.width * self.scale,
			height=plan.height * self.scale,
			cells=tuple(cells),
			title=self.to_screen_text(plan.title),
			page_number=self.to_screen_text(plan.page_number),
		)

	#============================================
	def cell_at(self, x: float, y: float) -> int | None:
		"""
		Hit test a screen point against the current page's cells.

		Args:
			x: Screen x in pixels.
			y: Screen y in pixels.

		Returns:
			Cell index, or None outside every cell.
		"""
		document = self.session.document
		rects = tlp.geometry.cell_rects(document.page_size, self.session.current_page.grid)
		page_x, page_y = self.to_page_point(x, y)
		return tlp.geometry.hit_test(rects, page_x, page_y)

	#============================================
	def click(self, x: float, y: float) -> str | None:
		"""
		Select the cell under a point, or clear the selection.

		Returns:
			Selected cell id, or None.
		"""
		index = self.cell_at(x, y)
		if index is None:
			self.session.select_cell(None)
			return None
		cell_id = self.session.current_page.cells[index].id
		self.session.select_cell(cell_id)
		return cell_id

	#============================================
	def begin_drag(self, x: float, y: float) -> bool:
		"""
		Start dragging the cell under a point. Only filled cells can be dragged.

		Returns:
			True if a drag started.
		"""
		index = self.cell_at(x, y)
		if index is None or self.session.current_page.cells[index].content is None:
			self.cancel_drag()
			return False
		self.drag_source = index
		self.drop_target = None
		return True

	#============================================
	def drag_over(self, x: float, y: float) -> int | None:
		if self.drag_source is None:
			return None
		self.drop_target = self.cell_at(x, y)
		return self.drop_target

	#============================================
	def drop(self, x: float, y: float) -> bool:
		"""
		Finish a drag by swapping the dragged cell with the cell under a point.

		Returns:
			True if two cells were swapped.
		"""
		source = self.drag_source
		target = self.cell_at(x, y)
		self.cancel_drag()
		if source is None or target is None or source == target:
			return False
		self.session.move_cell(source, target)
		return True

	#============================================
	def cancel_drag(self) -> None:
		self.drag_source = None
		self.drop_target = None

	#============================================
	def drop_files(self, x: float, y: float, paths: list[str | pathlib.Path]) -> list[str]:
		"""
		Handle image files dropped onto the canvas.

		A single file dropped onto a cell replaces that cell's content. Any
		other drop fills the first empty cells, adding pages as needed.

		Args:
			x: Screen x in pixels.
			y: Screen y in pixels.
			paths: Dropped file paths.

		Returns:
			Messages for files that were skipped.
		"""
		contents, skipped = tlp.session.load_image_files(paths)
		if not contents:
			return skipped
		index = self.cell_at(x, y)
		if index is not None and len(contents) == 1:
			self.session.set_cell_content(index, contents[0])
			self.session.select_cell(self.session.current_page.cells[index].id)
		else:
			self.session.add_contents(contents)
		return skipped
