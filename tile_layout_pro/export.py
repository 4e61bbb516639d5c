"""
PDF export: one output page per document page at true point size.

Raster images are drawn with ReportLab. SVG and PDF payloads are merged
in as vector pages with pypdf so they are never rasterized.
"""

# Standard Library
import io
import pathlib

# PIP3 modules
import cairosvg
import PIL.Image
import pypdf
import pypdf.errors
import reportlab.lib.utils
import reportlab.pdfgen.canvas

# local repo modules
import tile_layout_pro as tlp
import tile_layout_pro.config
import tile_layout_pro.errors
import tile_layout_pro.geometry
import tile_layout_pro.layout_plan
import tile_layout_pro.media
import tile_layout_pro.model


CellContent = tlp.model.CellContent
Document = tlp.model.Document
ExportResult = tlp.config.ExportResult
EmbedSkip = tlp.errors.EmbedSkip
Rect = tlp.geometry.Rect
PagePlan = tlp.layout_plan.PagePlan
TextItem = tlp.layout_plan.TextItem

RASTER_MEDIA_TYPES = tlp.config.RASTER_MEDIA_TYPES
GRID_LINE_COLOR = tlp.config.GRID_LINE_COLOR
GRID_LINE_WIDTH = tlp.config.GRID_LINE_WIDTH
GRID_LINE_DASH = tlp.config.GRID_LINE_DASH


#============================================
def draw_text_item(pdf: reportlab.pdfgen.canvas.Canvas, item: TextItem, page_height: float) -> None:
	"""
	Draw a centered text item.

	Args:
		pdf: ReportLab canvas.
		item: Text item in top-left page coordinates.
		page_height: Page height in points.
	"""
	color = tlp.layout_plan.parse_hex_color(item.color)
	pdf.setFillColorRGB(color[0], color[1], color[2])
	pdf.setFont(item.font_name, item.font_size)
	baseline = page_height - tlp.layout_plan.text_baseline(item)
	pdf.drawCentredString(item.center_x, baseline, item.text)


#============================================
def draw_dashed_border(pdf: reportlab.pdfgen.canvas.Canvas, rect: Rect, page_height: float) -> None:
	"""
	Draw the dashed outline of an empty cell.

	Args:
		pdf: ReportLab canvas.
		rect: Cell rectangle.
		page_height: Page height in points.
	"""
	flipped = tlp.geometry.flip_rect(rect, page_height)
	color = tlp.layout_plan.parse_hex_color(GRID_LINE_COLOR)
	pdf.saveState()
	pdf.setStrokeColorRGB(color[0], color[1], color[2])
	pdf.setLineWidth(GRID_LINE_WIDTH)
	pdf.setDash(list(GRID_LINE_DASH), 0)
	pdf.rect(flipped.x, flipped.y, flipped.width, flipped.height, stroke=1, fill=0)
	pdf.restoreState()


#============================================
def build_raster_reader(content: CellContent, media_type: str) -> reportlab.lib.utils.ImageReader:
	"""
	Decode a raster payload for ReportLab.

	Args:
		content: Content with raster bytes.
		media_type: Resolved media type.

	Returns:
		ImageReader.
	"""
	if media_type not in RASTER_MEDIA_TYPES:
		raise EmbedSkip(content.filename, media_type, "not a supported raster type")
	try:
		image = PIL.Image.open(io.BytesIO(content.image))
		image.load()
	except (OSError, ValueError) as error:
		raise EmbedSkip(content.filename, media_type, str(error)) from error
	if image.mode not in ("RGB", "RGBA", "L"):
		image = image.convert("RGBA")
	return reportlab.lib.utils.ImageReader(image)


#============================================
def build_vector_page(content: CellContent, media_type: str) -> pypdf.PageObject:
	"""
	Turn an SVG or PDF payload into a PDF page object.

	Args:
		content: Content with vector bytes.
		media_type: Resolved media type.

	Returns:
		First page of the vector payload as a PDF page.
	"""
	try:
		if media_type == "image/svg+xml":
			pdf_bytes = cairosvg.svg2pdf(bytestring=content.image)
		elif media_type == "application/pdf":
			pdf_bytes = content.image
		else:
			raise EmbedSkip(content.filename, media_type, "not a vector type")
		reader = pypdf.PdfReader(io.BytesIO(pdf_bytes))
		if len(reader.pages) == 0:
			raise EmbedSkip(content.filename, media_type, "no pages")
		return reader.pages[0]
	except (ValueError, OSError, SyntaxError, pypdf.errors.PdfReadError) as error:
		raise EmbedSkip(content.filename, media_type, str(error)) from error


#============================================
def vector_transform(vector_page: pypdf.PageObject, target: Rect, page_height: float) -> pypdf.Transformation:
	"""
	Map a vector page's media box onto a target rectangle.

	Args:
		vector_page: Page to place.
		target: Image fit rectangle in top-left page coordinates.
		page_height: Output page height in points.

	Returns:
		pypdf Transformation.
	"""
	box = vector_page.mediabox
	box_width = float(box.width)
	box_height = float(box.height)
	flipped = tlp.geometry.flip_rect(target, page_height)
	return (
		pypdf.Transformation()
		.translate(-float(box.left), -float(box.bottom))
		.scale(target.width / box_width, target.height / box_height)
		.translate(flipped.x, flipped.y)
	)


#============================================
def draw_page(
	pdf: reportlab.pdfgen.canvas.Canvas,
	plan: PagePlan,
	raster_cache: dict[bytes, reportlab.lib.utils.ImageReader],
	vector_cache: dict[bytes, pypdf.PageObject],
	vectors: list[tuple[int, pypdf.PageObject, Rect]],
	skipped: list[str],
) -> int:
	"""
	Draw one planned page onto the canvas.

	Vector placements are collected for merging after the canvas is saved.

	Args:
		pdf: ReportLab canvas.
		plan: Page plan.
		raster_cache: Decoded rasters keyed by payload.
		vector_cache: Vector pages keyed by payload.
		vectors: Collected (page_index, vector_page, rect) placements.
		skipped: Collected skip messages.

	Returns:
		Number of raster images drawn.
	"""
	drawn = 0
	if plan.title is not None:
		draw_text_item(pdf, plan.title, plan.height)
	if plan.page_number is not None:
		draw_text_item(pdf, plan.page_number, plan.height)
	for cell in plan.cells:
		if cell.dashed_border:
			draw_dashed_border(pdf, cell.rect, plan.height)
		if cell.content is None:
			continue
		if cell.caption is not None:
			draw_text_item(pdf, cell.caption, plan.height)
		if cell.image_rect is None:
			skipped.append(f"page {plan.page_index + 1} cell {cell.index + 1}: {cell.skip_reason}")
			continue
		payload = cell.content.image
		try:
			if tlp.media.is_vector(cell.media_type):
				if payload not in vector_cache:
					vector_cache[payload] = build_vector_page(cell.content, cell.media_type)
				vectors.append((plan.page_index, vector_cache[payload], cell.image_rect))
				continue
			if payload not in raster_cache:
				raster_cache[payload] = build_raster_reader(cell.content, cell.media_type)
		except EmbedSkip as error:
			skipped.append(f"page {plan.page_index + 1} cell {cell.index + 1}: {error.message}")
			continue
		flipped = tlp.geometry.flip_rect(cell.image_rect, plan.height)
		pdf.drawImage(
			raster_cache[payload],
			flipped.x,
			flipped.y,
			width=flipped.width,
			height=flipped.height,
			mask="auto",
			preserveAspectRatio=False,
			anchor="sw",
		)
		drawn += 1
	return drawn


#============================================
def export_pdf(document: Document, output_path: str | pathlib.Path, progress=None) -> ExportResult:
	"""
	Export every page of a document to a PDF file.

	All pages are planned before anything is written, so a page whose grid
	does not fit raises GeometryError and leaves no partial file.

	Args:
		document: Document to export.
		output_path: Output PDF path.
		progress: Optional callable(current, total) called after each page.

	Returns:
		ExportResult.
	"""
	snapshot = document.snapshot()
	plans = [
		tlp.layout_plan.build_page_plan(snapshot, page_index)
		for page_index in range(len(snapshot.pages))
	]
	page_width, page_height = tlp.geometry.page_size_points(snapshot.page_size)

	buffer = io.BytesIO()
	pdf = reportlab.pdfgen.canvas.Canvas(buffer, pagesize=(page_width, page_height))
	if snapshot.title:
		pdf.setTitle(snapshot.title)
	raster_cache: dict[bytes, reportlab.lib.utils.ImageReader] = {}
	vector_cache: dict[bytes, pypdf.PageObject] = {}
	vectors: list[tuple[int, pypdf.PageObject, Rect]] = []
	skipped: list[str] = []
	drawn = 0
	for plan in plans:
		drawn += draw_page(pdf, plan, raster_cache, vector_cache, vectors, skipped)
		pdf.showPage()
		if progress is not None:
			progress(plan.page_index + 1, len(plans))
	pdf.save()

	output_path = pathlib.Path(output_path)
	if not vectors:
		output_path.write_bytes(buffer.getvalue())
	else:
		buffer.seek(0)
		reader = pypdf.PdfReader(buffer)
		writer = pypdf.PdfWriter()
		for page in reader.pages:
			writer.add_page(page)
		for page_index, vector_page, target in vectors:
			transform = vector_transform(vector_page, target, page_height)
			writer.pages[page_index].merge_transformed_page(vector_page, transform)
		writer.write(str(output_path))

	return ExportResult(
		pages=len(plans),
		images_embedded=drawn + len(vectors),
		vector_images=len(vectors),
		skipped=skipped,
	)
