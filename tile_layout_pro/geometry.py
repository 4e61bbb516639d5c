"""
Grid geometry shared by every renderer.

All rectangles use a top-left origin with y increasing downward, in points.
Adapters that draw with a bottom-left origin convert with flip_rect().
"""

# Standard Library
import dataclasses

# local repo modules
import tile_layout_pro as tlp
import tile_layout_pro.config
import tile_layout_pro.errors
import tile_layout_pro.model


GridSettings = tlp.model.GridSettings
GeometryError = tlp.errors.GeometryError

PAGE_SIZES_MM = tlp.config.PAGE_SIZES_MM
CAPTION_HEIGHT = tlp.config.CAPTION_HEIGHT


@dataclasses.dataclass(frozen=True)
class Rect:
	x: float
	y: float
	width: float
	height: float

	@property
	def right(self) -> float:
		return self.x + self.width

	@property
	def bottom(self) -> float:
		return self.y + self.height

	#============================================
	def contains(self, x: float, y: float) -> bool:
		"""
		Check whether a point lies inside the rectangle.

		Edges on the top and left are inside, edges on the right and bottom
		are outside, so adjacent rectangles never both claim a point.

		Args:
			x: Point x.
			y: Point y.

		Returns:
			True if the point is inside.
		"""
		return self.x <= x < self.right and self.y <= y < self.bottom


#============================================
def page_size_points(page_size: str) -> tuple[float, float]:
	"""
	Get page width and height in points.

	Args:
		page_size: Page size name ("A4" or "A3").

	Returns:
		Tuple of (width, height) in points.
	"""
	key = getattr(page_size, "value", page_size)
	if key not in PAGE_SIZES_MM:
		raise ValueError(f"Unknown page size: {page_size}")
	width_mm, height_mm = PAGE_SIZES_MM[key]
	return (tlp.config.mm_to_points(width_mm), tlp.config.mm_to_points(height_mm))


#============================================
def cell_size(page_size: str, grid: GridSettings) -> tuple[float, float]:
	"""
	Compute the size of one cell.

	Args:
		page_size: Page size name.
		grid: Grid settings (gap and margin in millimeters).

	Returns:
		Tuple of (cell_width, cell_height) in points.
	"""
	if grid.rows <= 0 or grid.cols <= 0:
		raise GeometryError(
			f"Grid needs at least one row and column, got {grid.rows}x{grid.cols}",
			details={"rows": grid.rows, "cols": grid.cols},
		)
	page_width, page_height = page_size_points(page_size)
	margin = tlp.config.mm_to_points(grid.margin)
	gap = tlp.config.mm_to_points(grid.gap)
	content_width = page_width - 2.0 * margin
	content_height = page_height - 2.0 * margin
	cell_width = (content_width - gap * (grid.cols - 1)) / grid.cols
	cell_height = (content_height - gap * (grid.rows - 1)) / grid.rows
	if not (cell_width > 0.0 and cell_height > 0.0):
		raise GeometryError(
			"Margin and gap leave no room for cells",
			details={
				"cell_width": cell_width,
				"cell_height": cell_height,
				"gap": grid.gap,
				"margin": grid.margin,
			},
		)
	return (cell_width, cell_height)


#============================================
def cell_rects(page_size: str, grid: GridSettings) -> list[Rect]:
	"""
	Compute one rectangle per cell in row-major order.

	Args:
		page_size: Page size name.
		grid: Grid settings.

	Returns:
		List of rectangles, index = row * cols + col.
	"""
	cell_width, cell_height = cell_size(page_size, grid)
	margin = tlp.config.mm_to_points(grid.margin)
	gap = tlp.config.mm_to_points(grid.gap)
	rects: list[Rect] = []
	for row in range(grid.rows):
		for col in range(grid.cols):
			x = margin + col * (cell_width + gap)
			y = margin + row * (cell_height + gap)
			rects.append(Rect(x, y, cell_width, cell_height))
	return rects


#============================================
def split_caption(cell: Rect, show_caption: bool) -> tuple[Rect, Rect | None]:
	"""
	Split a cell into an image area and a caption strip.

	Args:
		cell: Cell rectangle.
		show_caption: Whether a filename caption is drawn.

	Returns:
		Tuple of (image_area, caption_strip or None).
	"""
	if not show_caption:
		return (cell, None)
	image_area = Rect(cell.x, cell.y, cell.width, cell.height - CAPTION_HEIGHT)
	caption = Rect(cell.x, image_area.bottom, cell.width, CAPTION_HEIGHT)
	return (image_area, caption)


#============================================
def image_fit_rect(container: Rect, image_aspect: float) -> Rect:
	"""
	Fit an image inside a container, centered, keeping its aspect ratio.

	Args:
		container: Area available to the image.
		image_aspect: Image width divided by height.

	Returns:
		Rectangle the image should be drawn into.
	"""
	if image_aspect <= 0.0:
		raise ValueError(f"Image aspect must be positive, got {image_aspect}")
	if container.width <= 0.0 or container.height <= 0.0:
		raise GeometryError(
			"Image area has no room",
			details={"width": container.width, "height": container.height},
		)
	container_aspect = container.width / container.height
	if image_aspect > container_aspect:
		draw_width = container.width
		draw_height = container.width / image_aspect
	else:
		draw_height = container.height
		draw_width = container.height * image_aspect
	draw_x = container.x + (container.width - draw_width) / 2.0
	draw_y = container.y + (container.height - draw_height) / 2.0
	return Rect(draw_x, draw_y, draw_width, draw_height)


#============================================
def hit_test(rects: list[Rect], x: float, y: float) -> int | None:
	"""
	Find the cell index under a point.

	Args:
		rects: Cell rectangles in index order.
		x: Point x.
		y: Point y.

	Returns:
		Cell index, or None for margins and gaps.
	"""
	for index, rect in enumerate(rects):
		if rect.contains(x, y):
			return index
	return None


#============================================
def scale_rect(rect: Rect, scale: float, offset_x: float = 0.0, offset_y: float = 0.0) -> Rect:
	"""
	Scale a rectangle from page points into a target box.
	"""
	return Rect(
		offset_x + rect.x * scale,
		offset_y + rect.y * scale,
		rect.width * scale,
		rect.height * scale,
	)


#============================================
def flip_rect(rect: Rect, page_height: float) -> Rect:
	"""
	Convert a top-left origin rectangle to a bottom-left origin one.

	Args:
		rect: Rectangle with y increasing downward.
		page_height: Page height in the same units.

	Returns:
		Rectangle whose y is the distance from the page bottom.
	"""
	return Rect(rect.x, page_height - rect.bottom, rect.width, rect.height)


#============================================
def fit_scale(page_width: float, page_height: float, box_width: float, box_height: float) -> float:
	"""
	Compute a uniform scale that fits a page inside a box.

	Args:
		page_width: Page width in points.
		page_height: Page height in points.
		box_width: Target box width.
		box_height: Target box height.

	Returns:
		Scale factor.
	"""
	if box_width <= 0.0 or box_height <= 0.0:
		raise GeometryError(
			"Target box has no room",
			details={"width": box_width, "height": box_height},
		)
	return min(box_width / page_width, box_height / page_height)
