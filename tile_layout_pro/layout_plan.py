"""
Per-page draw plans shared by the canvas, export, and thumbnail renderers.

A plan says which content sits in which cell, where its image and caption
go, which empty cells get a dashed border, and where header text sits.
Coordinates are page points with a top-left origin.
"""

# Standard Library
import dataclasses

# PIP3 modules
import reportlab.pdfbase.pdfmetrics

# local repo modules
import tile_layout_pro as tlp
import tile_layout_pro.config
import tile_layout_pro.errors
import tile_layout_pro.geometry
import tile_layout_pro.media
import tile_layout_pro.model


Rect = tlp.geometry.Rect
CellContent = tlp.model.CellContent
Document = tlp.model.Document
EmbedSkip = tlp.errors.EmbedSkip

CAPTION_FONT_SIZE = tlp.config.CAPTION_FONT_SIZE
CAPTION_TEXT_OFFSET = tlp.config.CAPTION_TEXT_OFFSET
CAPTION_TEXT_COLOR = tlp.config.CAPTION_TEXT_COLOR
HEADER_FONT_SIZE = tlp.config.HEADER_FONT_SIZE
HEADER_TEXT_COLOR = tlp.config.HEADER_TEXT_COLOR
TITLE_TOP_OFFSET = tlp.config.TITLE_TOP_OFFSET
PAGE_NUMBER_BOTTOM_OFFSET = tlp.config.PAGE_NUMBER_BOTTOM_OFFSET
DEFAULT_FONT_TEXT = tlp.config.DEFAULT_FONT_TEXT
DEFAULT_FONT_TITLE = tlp.config.DEFAULT_FONT_TITLE
ELLIPSIS = tlp.config.ELLIPSIS


@dataclasses.dataclass(frozen=True)
class TextItem:
	text: str
	center_x: float
	top: float
	font_name: str
	font_size: float
	color: str


@dataclasses.dataclass(frozen=True)
class CellPlan:
	index: int
	cell_id: str
	rect: Rect
	content: CellContent | None
	media_type: str = ""
	image_rect: Rect | None = None
	caption: TextItem | None = None
	caption_rect: Rect | None = None
	dashed_border: bool = False
	skip_reason: str = ""


@dataclasses.dataclass(frozen=True)
class PagePlan:
	page_index: int
	page_count: int
	width: float
	height: float
	cells: tuple[CellPlan, ...]
	title: TextItem | None = None
	page_number: TextItem | None = None


#============================================
def fit_text_to_width(text: str, font_name: str, font_size: float, max_width: float) -> str:
	"""
	Truncate text with an ellipsis so it fits a width.

	Args:
		text: Text to fit.
		font_name: ReportLab font name.
		font_size: Font size in points.
		max_width: Available width in points.

	Returns:
		The text, or a shortened copy ending in an ellipsis.
	"""
	width = reportlab.pdfbase.pdfmetrics.stringWidth(text, font_name, font_size)
	if width <= max_width:
		return text
	for end in range(len(text) - 1, 0, -1):
		candidate = text[:end].rstrip() + ELLIPSIS
		if reportlab.pdfbase.pdfmetrics.stringWidth(candidate, font_name, font_size) <= max_width:
			return candidate
	return ""


#============================================
def plan_cell(
	index: int,
	cell: tlp.model.Cell,
	rect: Rect,
	show_filenames: bool,
	show_grid_lines: bool,
) -> CellPlan:
	"""
	Plan one cell: image fit rect, caption, or dashed border.

	Args:
		index: Cell index.
		cell: Cell to plan.
		rect: Cell rectangle.
		show_filenames: Whether captions are drawn.
		show_grid_lines: Whether empty cells get a dashed border.

	Returns:
		CellPlan.
	"""
	content = cell.content
	if content is None:
		return CellPlan(
			index=index,
			cell_id=cell.id,
			rect=rect,
			content=None,
			dashed_border=show_grid_lines,
		)

	image_area, caption_rect = tlp.geometry.split_caption(rect, show_filenames)
	caption = None
	if caption_rect is not None and content.filename:
		caption = TextItem(
			text=fit_text_to_width(content.filename, DEFAULT_FONT_TEXT, CAPTION_FONT_SIZE, rect.width),
			center_x=rect.x + rect.width / 2.0,
			top=caption_rect.y + CAPTION_TEXT_OFFSET,
			font_name=DEFAULT_FONT_TEXT,
			font_size=CAPTION_FONT_SIZE,
			color=CAPTION_TEXT_COLOR,
		)

	media_type = tlp.media.resolve_media_type(content)
	try:
		aspect = tlp.media.image_aspect(content)
	except EmbedSkip as error:
		return CellPlan(
			index=index,
			cell_id=cell.id,
			rect=rect,
			content=content,
			media_type=media_type,
			caption=caption,
			caption_rect=caption_rect,
			skip_reason=error.message,
		)
	return CellPlan(
		index=index,
		cell_id=cell.id,
		rect=rect,
		content=content,
		media_type=media_type,
		image_rect=tlp.geometry.image_fit_rect(image_area, aspect),
		caption=caption,
		caption_rect=caption_rect,
	)


#============================================
def build_page_plan(document: Document, page_index: int) -> PagePlan:
	"""
	Build the draw plan for one page.

	Args:
		document: Document snapshot.
		page_index: Page to plan.

	Returns:
		PagePlan.
	"""
	if page_index < 0 or page_index >= len(document.pages):
		raise IndexError(f"Page index {page_index} out of range for {len(document.pages)} pages")
	layout = document.pages[page_index].layout
	width, height = tlp.geometry.page_size_points(document.page_size)
	rects = tlp.geometry.cell_rects(document.page_size, layout.grid)
	cells = tuple(
		plan_cell(index, cell, rects[index], document.show_filenames, document.show_grid_lines)
		for index, cell in enumerate(layout.cells)
	)

	title = None
	if document.title:
		title = TextItem(
			text=document.title,
			center_x=width / 2.0,
			top=TITLE_TOP_OFFSET,
			font_name=DEFAULT_FONT_TITLE,
			font_size=HEADER_FONT_SIZE,
			color=HEADER_TEXT_COLOR,
		)

	page_number = None
	page_count = len(document.pages)
	if document.show_page_numbers:
		page_number = TextItem(
			text=f"{page_index + 1}/{page_count}",
			center_x=width / 2.0,
			top=height - PAGE_NUMBER_BOTTOM_OFFSET,
			font_name=DEFAULT_FONT_TEXT,
			font_size=HEADER_FONT_SIZE,
			color=HEADER_TEXT_COLOR,
		)

	return PagePlan(
		page_index=page_index,
		page_count=page_count,
		width=width,
		height=height,
		cells=cells,
		title=title,
		page_number=page_number,
	)


#============================================
def text_baseline(item: TextItem) -> float:
	"""
	Get the baseline of a text item, measured from the page top.

	Args:
		item: Text item whose top edge is known.

	Returns:
		Baseline distance from the page top in points.
	"""
	ascent = reportlab.pdfbase.pdfmetrics.getAscent(item.font_name) * item.font_size / 1000.0
	return item.top + ascent


#============================================
def parse_hex_color(value: str) -> tuple[float, float, float]:
	"""
	Parse a hex color into RGB floats.

	Args:
		value: Color like "#RRGGBB".

	Returns:
		Tuple of (r, g, b) in 0..1.
	"""
	value = value.strip().lstrip("#")
	if len(value) != 6:
		return (0.0, 0.0, 0.0)
	red = int(value[0:2], 16) / 255.0
	green = int(value[2:4], 16) / 255.0
	blue = int(value[4:6], 16) / 255.0
	return (red, green, blue)
