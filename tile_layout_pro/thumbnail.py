"""
Thumbnail previews of the first page of a layout.
"""

# Standard Library
import io
import pathlib

# PIP3 modules
import cairosvg
import fitz
import PIL.Image
import PIL.ImageDraw
import PIL.ImageFont

# local repo modules
import tile_layout_pro as tlp
import tile_layout_pro.archive
import tile_layout_pro.config
import tile_layout_pro.errors
import tile_layout_pro.geometry
import tile_layout_pro.layout_plan
import tile_layout_pro.model


CellContent = tlp.model.CellContent
Document = tlp.model.Document
EmbedSkip = tlp.errors.EmbedSkip
GeometryError = tlp.errors.GeometryError
Rect = tlp.geometry.Rect
TextItem = tlp.layout_plan.TextItem

PAGE_BACKGROUND_COLOR = tlp.config.PAGE_BACKGROUND_COLOR
GRID_LINE_COLOR = tlp.config.GRID_LINE_COLOR
GRID_LINE_WIDTH = tlp.config.GRID_LINE_WIDTH
GRID_LINE_DASH = tlp.config.GRID_LINE_DASH


#============================================
def load_font(size: float) -> PIL.ImageFont.ImageFont:
	return PIL.ImageFont.load_default(size=max(1.0, size))


#============================================
def draw_text_item(draw: PIL.ImageDraw.ImageDraw, item: TextItem, scale: float) -> None:
	"""
	Draw a centered text item scaled into thumbnail pixels.

	Args:
		draw: Drawing context.
		item: Text item in page points.
		scale: Pixels per point.
	"""
	font = load_font(item.font_size * scale)
	left, top, right, _bottom = draw.textbbox((0, 0), item.text, font=font)
	x = item.center_x * scale - (right - left) / 2.0 - left
	y = item.top * scale - top
	draw.text((x, y), item.text, fill=item.color, font=font)


#============================================
def draw_dashed_rect(draw: PIL.ImageDraw.ImageDraw, rect: Rect, scale: float) -> None:
	"""
	Draw a dashed rectangle outline in thumbnail pixels.

	Args:
		draw: Drawing context.
		rect: Rectangle in page points.
		scale: Pixels per point.
	"""
	on_length = GRID_LINE_DASH[0] * scale
	off_length = GRID_LINE_DASH[1] * scale
	width = max(1, round(GRID_LINE_WIDTH * scale))
	box = tlp.geometry.scale_rect(rect, scale)
	edges = [
		((box.x, box.y), (box.right, box.y)),
		((box.right, box.y), (box.right, box.bottom)),
		((box.right, box.bottom), (box.x, box.bottom)),
		((box.x, box.bottom), (box.x, box.y)),
	]
	for (x0, y0), (x1, y1) in edges:
		length = abs(x1 - x0) + abs(y1 - y0)
		if length <= 0.0 or on_length <= 0.0:
			continue
		step_x = (x1 - x0) / length
		step_y = (y1 - y0) / length
		position = 0.0
		while position < length:
			end = min(position + on_length, length)
			draw.line(
				[
					(x0 + step_x * position, y0 + step_y * position),
					(x0 + step_x * end, y0 + step_y * end),
				],
				fill=GRID_LINE_COLOR,
				width=width,
			)
			position = end + off_length


#============================================
def rasterize_content(content: CellContent, media_type: str, size: tuple[int, int]) -> PIL.Image.Image:
	"""
	Produce an RGBA image of a content at an exact pixel size.

	Vector payloads are rendered directly at the target size so they stay
	sharp; rasters are resampled.

	Args:
		content: Content to rasterize.
		media_type: Resolved media type.
		size: Target (width, height) in pixels.

	Returns:
		PIL image of the requested size.
	"""
	width, height = size
	try:
		if media_type == "image/svg+xml":
			png_bytes = cairosvg.svg2png(
				bytestring=content.image,
				output_width=width,
				output_height=height,
			)
			image = PIL.Image.open(io.BytesIO(png_bytes))
		elif media_type == "application/pdf":
			document = fitz.open(stream=content.image, filetype="pdf")
			try:
				page = document[0]
				matrix = fitz.Matrix(width / page.rect.width, height / page.rect.height)
				pixmap = page.get_pixmap(matrix=matrix, alpha=False)
				image = PIL.Image.frombytes("RGB", [pixmap.width, pixmap.height], pixmap.samples)
			finally:
				document.close()
		else:
			image = PIL.Image.open(io.BytesIO(content.image))
		image.load()
	except (ValueError, OSError, SyntaxError, RuntimeError, IndexError) as error:
		raise EmbedSkip(content.filename, media_type, str(error)) from error
	image = image.convert("RGBA")
	if image.size != (width, height):
		image = image.resize((width, height), PIL.Image.LANCZOS)
	return image


#============================================
def render_thumbnail(document: Document, max_width: float, max_height: float) -> PIL.Image.Image:
	"""
	Render the first page of a document into a bounding box.

	The page is scaled uniformly to fit the box, keeping its aspect ratio.

	Args:
		document: Document to preview.
		max_width: Bounding box width in pixels.
		max_height: Bounding box height in pixels.

	Returns:
		RGB PIL image.
	"""
	snapshot = document.snapshot()
	plan = tlp.layout_plan.build_page_plan(snapshot, 0)
	scale = tlp.geometry.fit_scale(plan.width, plan.height, max_width, max_height)
	output_width = int(plan.width * scale)
	output_height = int(plan.height * scale)
	if output_width <= 0 or output_height <= 0:
		raise GeometryError(
			"Thumbnail box is too small",
			details={"width": max_width, "height": max_height},
		)

	image = PIL.Image.new("RGB", (output_width, output_height), PAGE_BACKGROUND_COLOR)
	draw = PIL.ImageDraw.Draw(image)
	if plan.title is not None:
		draw_text_item(draw, plan.title, scale)
	if plan.page_number is not None:
		draw_text_item(draw, plan.page_number, scale)

	for cell in plan.cells:
		if cell.dashed_border:
			draw_dashed_rect(draw, cell.rect, scale)
		if cell.content is None:
			continue
		if cell.image_rect is not None:
			target = tlp.geometry.scale_rect(cell.image_rect, scale)
			pixel_size = (max(1, round(target.width)), max(1, round(target.height)))
			try:
				tile = rasterize_content(cell.content, cell.media_type, pixel_size)
			except EmbedSkip:
				tile = None
			if tile is not None:
				image.paste(tile, (round(target.x), round(target.y)), tile)
		if cell.caption is not None:
			draw_text_item(draw, cell.caption, scale)
	return image


#============================================
def render_archive_thumbnail(path: str | pathlib.Path, max_width: float, max_height: float) -> PIL.Image.Image:
	"""
	Render a thumbnail straight from a layout file.

	Args:
		path: .tlp container or legacy .json manifest.
		max_width: Bounding box width in pixels.
		max_height: Bounding box height in pixels.

	Returns:
		RGB PIL image.
	"""
	loaded = tlp.archive.load_layout(path)
	return render_thumbnail(loaded.document, max_width, max_height)
