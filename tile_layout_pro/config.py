"""
Shared configuration and constants.
"""

import dataclasses


MM_TO_POINTS = 2.834645669
PAGE_SIZES_MM = {
	"A4": (210.0, 297.0),
	"A3": (297.0, 420.0),
}
DEFAULT_PAGE_SIZE = "A4"

DEFAULT_ROWS = 2
DEFAULT_COLUMNS = 2
DEFAULT_GAP_MM = 5.0
DEFAULT_MARGIN_MM = 10.0

CAPTION_HEIGHT = 12.0
CAPTION_TEXT_OFFSET = 2.0
CAPTION_FONT_SIZE = 8.0
TITLE_TOP_OFFSET = 15.0
PAGE_NUMBER_BOTTOM_OFFSET = 25.0
HEADER_FONT_SIZE = 10.0
ELLIPSIS = "..."

DEFAULT_FONT_TEXT = "Courier"
DEFAULT_FONT_TITLE = "Helvetica"
HEADER_TEXT_COLOR = "#666666"
CAPTION_TEXT_COLOR = "#4d4d4d"
GRID_LINE_COLOR = "#e5e5e5"
GRID_LINE_WIDTH = 0.75
GRID_LINE_DASH = (4.0, 4.0)
PAGE_BACKGROUND_COLOR = "#ffffff"

DISPLAY_PIXELS_PER_MM = 2.5
PROGRESS_BAR_WIDTH = 20

MANIFEST_NAME = "layout.json"
IMAGE_STORE_DIR = "images"
IMAGE_REF_PREFIX = "image_"
CONTAINER_SUFFIX = ".tlp"
LEGACY_SUFFIX = ".json"

DEFAULT_IMAGE_EXTENSION = ".png"
MEDIA_TYPE_EXTENSIONS = {
	"image/png": ".png",
	"image/jpeg": ".jpg",
	"image/gif": ".gif",
	"image/webp": ".webp",
	"image/bmp": ".bmp",
	"image/svg+xml": ".svg",
	"application/pdf": ".pdf",
}
RASTER_MEDIA_TYPES = {
	"image/png",
	"image/jpeg",
	"image/gif",
	"image/webp",
	"image/bmp",
}
VECTOR_MEDIA_TYPES = {
	"image/svg+xml",
	"application/pdf",
}
SVG_DEFAULT_SIZE = 100.0


@dataclasses.dataclass
class ViewPreferences:
	"""
	UI-only preferences that never belong to a Document.
	"""
	zoom: float = 1.0
	dark_mode: bool = False

	#============================================
	@classmethod
	def from_manifest(cls, data: dict) -> "ViewPreferences":
		"""
		Migrate UI keys found in historical manifests.

		Args:
			data: Parsed manifest dictionary.

		Returns:
			ViewPreferences with any recognized keys applied.
		"""
		preferences = cls()
		zoom = data.get("zoom")
		if isinstance(zoom, (int, float)) and not isinstance(zoom, bool) and zoom > 0:
			preferences.zoom = float(zoom)
		dark_mode = data.get("darkMode")
		if isinstance(dark_mode, bool):
			preferences.dark_mode = dark_mode
		return preferences


@dataclasses.dataclass
class ExportResult:
	pages: int
	images_embedded: int
	vector_images: int
	skipped: list[str] = dataclasses.field(default_factory=list)


#============================================
def mm_to_points(value: float) -> float:
	"""
	Convert millimeters to points.

	Args:
		value: Millimeter value.

	Returns:
		Points value.
	"""
	return value * MM_TO_POINTS
