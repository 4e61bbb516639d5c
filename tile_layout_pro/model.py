"""
Layout document model.

Pages hold an immutable PageLayout snapshot. Every change to a page's
cells, grid, or overflow swaps in a whole new snapshot, so a reader that
grabs page.layout never sees cells and grid settings that disagree.
"""

# Standard Library
import dataclasses
import enum
import hashlib
import math
import uuid

# local repo modules
import tile_layout_pro as tlp
import tile_layout_pro.config


DEFAULT_ROWS = tlp.config.DEFAULT_ROWS
DEFAULT_COLUMNS = tlp.config.DEFAULT_COLUMNS
DEFAULT_GAP_MM = tlp.config.DEFAULT_GAP_MM
DEFAULT_MARGIN_MM = tlp.config.DEFAULT_MARGIN_MM


class PageSize(str, enum.Enum):
	A4 = "A4"
	A3 = "A3"


@dataclasses.dataclass(frozen=True)
class GridSettings:
	rows: int = DEFAULT_ROWS
	cols: int = DEFAULT_COLUMNS
	gap: float = DEFAULT_GAP_MM
	margin: float = DEFAULT_MARGIN_MM

	def __post_init__(self) -> None:
		if self.rows < 1 or self.cols < 1:
			raise ValueError(f"Grid needs at least 1 row and 1 column, got {self.rows}x{self.cols}")
		if not (math.isfinite(self.gap) and math.isfinite(self.margin)):
			raise ValueError(f"Gap and margin must be finite, got gap={self.gap} margin={self.margin}")
		if self.gap < 0 or self.margin < 0:
			raise ValueError(f"Gap and margin must not be negative, got gap={self.gap} margin={self.margin}")

	@property
	def capacity(self) -> int:
		return self.rows * self.cols


@dataclasses.dataclass(frozen=True)
class CellContent:
	"""
	One placed image: file metadata plus the raw image bytes.

	Two contents show the same image when their bytes are equal, even if
	their filenames differ.
	"""
	filename: str
	original_path: str
	image: bytes = b""
	media_type: str = ""

	@property
	def has_image(self) -> bool:
		return len(self.image) > 0

	@property
	def digest(self) -> str:
		return hashlib.sha256(self.image).hexdigest()

	#============================================
	def same_image(self, other: "CellContent") -> bool:
		"""
		Check whether two contents carry byte-identical images.

		Args:
			other: Content to compare with.

		Returns:
			True if the image payloads are equal.
		"""
		return self.image == other.image


@dataclasses.dataclass(frozen=True)
class Cell:
	id: str
	content: CellContent | None = None


@dataclasses.dataclass(frozen=True)
class PageLayout:
	grid: GridSettings
	cells: tuple[Cell, ...]
	overflow: tuple[CellContent, ...] = ()

	def __post_init__(self) -> None:
		if len(self.cells) != self.grid.capacity:
			raise ValueError(
				f"Page has {len(self.cells)} cells but grid is {self.grid.rows}x{self.grid.cols}"
			)


@dataclasses.dataclass
class Page:
	id: str
	layout: PageLayout

	@property
	def grid(self) -> GridSettings:
		return self.layout.grid

	@property
	def cells(self) -> tuple[Cell, ...]:
		return self.layout.cells

	@property
	def overflow(self) -> tuple[CellContent, ...]:
		return self.layout.overflow

	#============================================
	def placed_contents(self) -> list[CellContent]:
		"""
		Get the contents attached to cells, in index order.

		Returns:
			List of CellContent.
		"""
		return [cell.content for cell in self.layout.cells if cell.content is not None]

	#============================================
	def all_contents(self) -> list[CellContent]:
		"""
		Get placed contents followed by overflow, in canonical order.

		Returns:
			List of CellContent.
		"""
		layout = self.layout
		placed = [cell.content for cell in layout.cells if cell.content is not None]
		return placed + list(layout.overflow)


@dataclasses.dataclass
class Document:
	page_size: PageSize = PageSize.A4
	pages: list[Page] = dataclasses.field(default_factory=list)
	show_filenames: bool = True
	show_grid_lines: bool = True
	show_page_numbers: bool = False
	title: str = ""

	#============================================
	def snapshot(self) -> "Document":
		"""
		Copy the document for a renderer.

		Page layouts are immutable, so the copy shares them and only the
		page list and page records are new.

		Returns:
			Independent Document sharing immutable layouts.
		"""
		pages = [Page(id=page.id, layout=page.layout) for page in self.pages]
		return dataclasses.replace(self, pages=pages)

	#============================================
	def content_count(self) -> int:
		"""
		Count content occurrences across cells and overflow.

		Returns:
			Number of CellContent occurrences.
		"""
		return sum(len(page.all_contents()) for page in self.pages)


#============================================
def new_id(prefix: str) -> str:
	"""
	Allocate an identifier that is never reused.

	Args:
		prefix: Identifier prefix, e.g. "cell" or "page".

	Returns:
		Identifier string.
	"""
	return f"{prefix}-{uuid.uuid4().hex}"


#============================================
def make_cells(count: int) -> tuple[Cell, ...]:
	"""
	Create empty cells with fresh ids.

	Args:
		count: Number of cells.

	Returns:
		Tuple of empty cells.
	"""
	return tuple(Cell(id=new_id("cell")) for _ in range(count))


#============================================
def make_page(grid: GridSettings | None = None) -> Page:
	"""
	Create an empty page.

	Args:
		grid: Grid settings, default 2x2.

	Returns:
		New Page.
	"""
	if grid is None:
		grid = GridSettings()
	layout = PageLayout(grid=grid, cells=make_cells(grid.capacity))
	return Page(id=new_id("page"), layout=layout)


#============================================
def new_document(page_size: PageSize = PageSize.A4) -> Document:
	"""
	Create a fresh document with one empty page.

	Args:
		page_size: Page size.

	Returns:
		New Document.
	"""
	return Document(page_size=PageSize(page_size), pages=[make_page()])
