"""
Image payload helpers: media types, data URLs, and intrinsic sizes.
"""

# Standard Library
import base64
import binascii
import io
import pathlib
import re
import xml.etree.ElementTree as StdElementTree

# PIP3 modules
import defusedxml.ElementTree as ElementTree
import PIL.Image
import pypdf
import pypdf.errors

# local repo modules
import tile_layout_pro as tlp
import tile_layout_pro.config
import tile_layout_pro.errors
import tile_layout_pro.model


CellContent = tlp.model.CellContent
EmbedSkip = tlp.errors.EmbedSkip

MEDIA_TYPE_EXTENSIONS = tlp.config.MEDIA_TYPE_EXTENSIONS
RASTER_MEDIA_TYPES = tlp.config.RASTER_MEDIA_TYPES
VECTOR_MEDIA_TYPES = tlp.config.VECTOR_MEDIA_TYPES
DEFAULT_IMAGE_EXTENSION = tlp.config.DEFAULT_IMAGE_EXTENSION
SVG_DEFAULT_SIZE = tlp.config.SVG_DEFAULT_SIZE

EXTENSION_MEDIA_TYPES = {ext: media for media, ext in MEDIA_TYPE_EXTENSIONS.items()}
EXTENSION_MEDIA_TYPES[".jpeg"] = "image/jpeg"
DATA_URL_PATTERN = re.compile(r"^data:([^;,]*)(;base64)?,(.*)$", re.DOTALL)
SVG_UNITS = {
	"": 1.0,
	"px": 1.0,
	"pt": 1.0,
	"mm": tlp.config.MM_TO_POINTS,
	"cm": tlp.config.MM_TO_POINTS * 10.0,
	"in": 72.0,
}


#============================================
def extension_for_media_type(media_type: str) -> str:
	"""
	Pick a file extension for a media type.

	Args:
		media_type: Media type like "image/png".

	Returns:
		Extension with a leading dot, ".png" when unknown.
	"""
	return MEDIA_TYPE_EXTENSIONS.get(media_type.strip().lower(), DEFAULT_IMAGE_EXTENSION)


#============================================
def media_type_from_name(name: str) -> str:
	"""
	Guess a media type from a file name.

	Args:
		name: File name or path.

	Returns:
		Media type, or "" when the extension is unknown.
	"""
	suffix = pathlib.PurePath(name).suffix.lower()
	return EXTENSION_MEDIA_TYPES.get(suffix, "")


#============================================
def sniff_media_type(data: bytes) -> str:
	"""
	Detect a media type from the leading bytes of a payload.

	Args:
		data: Image bytes.

	Returns:
		Media type, or "" when not recognized.
	"""
	if data.startswith(b"\x89PNG\r\n\x1a\n"):
		return "image/png"
	if data.startswith(b"\xff\xd8\xff"):
		return "image/jpeg"
	if data.startswith((b"GIF87a", b"GIF89a")):
		return "image/gif"
	if data[:4] == b"RIFF" and data[8:12] == b"WEBP":
		return "image/webp"
	if data.startswith(b"BM"):
		return "image/bmp"
	if data.startswith(b"%PDF"):
		return "application/pdf"
	head = data[:1024].lstrip().lower()
	if head.startswith(b"<svg") or (head.startswith(b"<?xml") and b"<svg" in head):
		return "image/svg+xml"
	return ""


#============================================
def resolve_media_type(content: CellContent) -> str:
	"""
	Get the media type of a content, falling back to sniffing.

	Args:
		content: CellContent.

	Returns:
		Media type, or "" when unknown.
	"""
	if content.media_type:
		return content.media_type
	sniffed = sniff_media_type(content.image)
	if sniffed:
		return sniffed
	return media_type_from_name(content.filename)


#============================================
def is_vector(media_type: str) -> bool:
	return media_type in VECTOR_MEDIA_TYPES


#============================================
def parse_data_url(value: str) -> tuple[str, bytes]:
	"""
	Decode a data URL into a media type and bytes.

	Args:
		value: String like "data:image/png;base64,....".

	Returns:
		Tuple of (media_type, payload).
	"""
	match = DATA_URL_PATTERN.match(value.strip())
	if match is None:
		raise ValueError("Not a data URL")
	media_type = match.group(1).strip().lower()
	body = match.group(3)
	if match.group(2):
		try:
			payload = base64.b64decode(body, validate=False)
		except binascii.Error as error:
			raise ValueError(f"Bad base64 image data: {error}") from error
	else:
		payload = body.encode("utf-8")
	return (media_type, payload)


#============================================
def build_data_url(media_type: str, data: bytes) -> str:
	"""
	Encode bytes as a base64 data URL.
	"""
	encoded = base64.b64encode(data).decode("ascii")
	return f"data:{media_type or 'image/png'};base64,{encoded}"


#============================================
def parse_svg_length(value: str | None, default_value: float) -> float:
	"""
	Parse an SVG length attribute into points.

	Args:
		value: String value like "120", "40mm" or "3in".
		default_value: Fallback when parsing fails.

	Returns:
		Parsed length.
	"""
	if value is None:
		return default_value
	value = value.strip().lower()
	match = re.match(r"^([0-9]*\.?[0-9]+(?:e[-+]?[0-9]+)?)\s*([a-z%]*)$", value)
	if match is None:
		return default_value
	unit = match.group(2)
	if unit not in SVG_UNITS:
		return default_value
	length = float(match.group(1)) * SVG_UNITS[unit]
	if length <= 0.0:
		return default_value
	return length


#============================================
def svg_size(data: bytes) -> tuple[float, float]:
	"""
	Read the intrinsic size of an SVG document.

	The viewBox wins over width and height; a missing or broken size falls
	back to 100 x 100.

	Args:
		data: SVG bytes.

	Returns:
		Tuple of (width, height).
	"""
	try:
		root = ElementTree.fromstring(data)
	except (StdElementTree.ParseError, ValueError) as error:
		raise ValueError(f"Unreadable SVG: {error}") from error
	view_box = root.attrib.get("viewBox")
	if view_box:
		parts = re.split(r"[\s,]+", view_box.strip())
		if len(parts) == 4:
			try:
				width = float(parts[2])
				height = float(parts[3])
			except ValueError:
				width = height = 0.0
			if width > 0.0 and height > 0.0:
				return (width, height)
	width = parse_svg_length(root.attrib.get("width"), SVG_DEFAULT_SIZE)
	height = parse_svg_length(root.attrib.get("height"), SVG_DEFAULT_SIZE)
	return (width, height)


#============================================
def pdf_size(data: bytes) -> tuple[float, float]:
	"""
	Read the size of the first page of a PDF payload.
	"""
	reader = pypdf.PdfReader(io.BytesIO(data))
	if len(reader.pages) == 0:
		raise ValueError("PDF has no pages")
	box = reader.pages[0].mediabox
	return (float(box.width), float(box.height))


#============================================
def raster_size(data: bytes) -> tuple[int, int]:
	"""
	Read the pixel size of a raster payload.
	"""
	with PIL.Image.open(io.BytesIO(data)) as image:
		return image.size


#============================================
def intrinsic_size(content: CellContent) -> tuple[float, float]:
	"""
	Get the natural width and height of a content's image.

	Args:
		content: CellContent with image bytes.

	Returns:
		Tuple of (width, height).
	"""
	media_type = resolve_media_type(content)
	if not content.has_image:
		raise EmbedSkip(content.filename, media_type, "no image data")
	try:
		if media_type == "image/svg+xml":
			width, height = svg_size(content.image)
		elif media_type == "application/pdf":
			width, height = pdf_size(content.image)
		else:
			width, height = raster_size(content.image)
	except (ValueError, OSError, pypdf.errors.PdfReadError) as error:
		raise EmbedSkip(content.filename, media_type, str(error)) from error
	if width <= 0 or height <= 0:
		raise EmbedSkip(content.filename, media_type, "image has no size")
	return (float(width), float(height))


#============================================
def image_aspect(content: CellContent) -> float:
	"""
	Get the width / height ratio of a content's image.
	"""
	width, height = intrinsic_size(content)
	return width / height


#============================================
def load_image_file(path: str | pathlib.Path) -> CellContent:
	"""
	Read an image file from disk into a CellContent.

	Args:
		path: Image file path.

	Returns:
		CellContent with bytes and media type.
	"""
	path = pathlib.Path(path)
	data = path.read_bytes()
	media_type = media_type_from_name(path.name) or sniff_media_type(data)
	if media_type not in RASTER_MEDIA_TYPES and media_type not in VECTOR_MEDIA_TYPES:
		raise ValueError(f"Unsupported image type: {path.name}")
	return CellContent(
		filename=path.name,
		original_path=str(path),
		image=data,
		media_type=media_type,
	)
