"""
Editing session: the open document plus current page, selection, and dirty state.
"""

# Standard Library
import pathlib

# local repo modules
import tile_layout_pro as tlp
import tile_layout_pro.archive
import tile_layout_pro.config
import tile_layout_pro.media
import tile_layout_pro.model
import tile_layout_pro.reflow


ArchiveLoad = tlp.archive.ArchiveLoad
CellContent = tlp.model.CellContent
Document = tlp.model.Document
Page = tlp.model.Page
PageSize = tlp.model.PageSize
ViewPreferences = tlp.config.ViewPreferences


class LayoutSession:
	"""
	Owns one Document and the editor state around it.

	Every change made through the session marks it dirty. Saving clears the
	flag. Opening a file replaces the document only when the load succeeds.
	"""

	def __init__(self, document: Document | None = None, preferences: ViewPreferences | None = None):
		if document is None:
			document = tlp.model.new_document()
		if preferences is None:
			preferences = ViewPreferences()
		self.document = document
		self.preferences = preferences
		self.path: pathlib.Path | None = None
		self.current_page_index = 0
		self.selected_cell_id: str | None = None
		self.dirty = False
		self.missing_refs: list[str] = []

	@property
	def current_page(self) -> Page:
		return self.document.pages[self.current_page_index]

	#============================================
	def mark_dirty(self) -> None:
		self.dirty = True

	#============================================
	def new(self, page_size: PageSize | str = PageSize.A4) -> None:
		"""
		Start over with a fresh one page document.

		Args:
			page_size: Page size for the new document.
		"""
		self.document = tlp.model.new_document(PageSize(page_size))
		self.path = None
		self.current_page_index = 0
		self.selected_cell_id = None
		self.dirty = False
		self.missing_refs = []

	#============================================
	def open(self, path: str | pathlib.Path) -> ArchiveLoad:
		"""
		Open a layout file.

		A FormatError from the load propagates and leaves the session as it
		was.

		Args:
			path: .tlp container or legacy .json manifest.

		Returns:
			ArchiveLoad with the missing image references.
		"""
		loaded = tlp.archive.load_layout(path)
		self.document = loaded.document
		self.preferences = loaded.preferences
		self.path = pathlib.Path(path)
		self.current_page_index = 0
		self.selected_cell_id = None
		self.dirty = False
		self.missing_refs = list(loaded.missing_refs)
		return loaded

	#============================================
	def save(self, path: str | pathlib.Path | None = None) -> pathlib.Path:
		"""
		Save the document, in the format matching the file extension.

		Args:
			path: Target path, default the path it was opened from or last saved to.

		Returns:
			The path written.
		"""
		if path is None:
			path = self.path
		if path is None:
			raise ValueError("No file path to save to")
		path = pathlib.Path(path)
		tlp.archive.save_layout(self.document, path)
		self.path = path
		self.dirty = False
		return path

	#============================================
	def go_to_page(self, index: int) -> None:
		tlp.reflow.check_page_index(self.document, index)
		self.current_page_index = index
		self.selected_cell_id = None

	#============================================
	def select_cell(self, cell_id: str | None) -> None:
		"""
		Select a cell on the current page, or clear the selection with None.

		Args:
			cell_id: Cell identifier.
		"""
		if cell_id is not None:
			location = tlp.reflow.find_cell(self.document, cell_id)
			if location is None or location[0] != self.current_page_index:
				raise KeyError(f"Cell {cell_id} is not on the current page")
		self.selected_cell_id = cell_id

	#============================================
	def selected_cell_index(self) -> int | None:
		if self.selected_cell_id is None:
			return None
		location = tlp.reflow.find_cell(self.document, self.selected_cell_id)
		if location is None or location[0] != self.current_page_index:
			return None
		return location[1]

	#============================================
	def clear_selected_cell(self) -> bool:
		"""
		Empty the selected cell.

		Returns:
			True if a cell was emptied.
		"""
		index = self.selected_cell_index()
		if index is None:
			return False
		if self.current_page.cells[index].content is None:
			return False
		tlp.reflow.set_cell_content(self.current_page, index, None)
		self.mark_dirty()
		return True

	#============================================
	def set_cell_content(self, index: int, content: CellContent | None) -> None:
		tlp.reflow.set_cell_content(self.current_page, index, content)
		self.mark_dirty()

	#============================================
	def move_cell(self, from_index: int, to_index: int) -> None:
		"""
		Swap two cells on the current page; the selection follows its content.

		Args:
			from_index: Dragged cell index.
			to_index: Drop target index.
		"""
		page = self.current_page
		selected = self.selected_cell_index()
		tlp.reflow.move_cell(page, from_index, to_index)
		if from_index != to_index:
			if selected == from_index:
				self.selected_cell_id = page.cells[to_index].id
			elif selected == to_index:
				self.selected_cell_id = page.cells[from_index].id
			self.mark_dirty()

	#============================================
	def swap_cells(self, from_page_index: int, from_index: int, to_page_index: int, to_index: int) -> None:
		tlp.reflow.check_page_index(self.document, from_page_index)
		tlp.reflow.check_page_index(self.document, to_page_index)
		from_page = self.document.pages[from_page_index]
		to_page = self.document.pages[to_page_index]
		tlp.reflow.swap_cells(from_page, from_index, to_page, to_index)
		self.mark_dirty()

	#============================================
	def set_grid(self, rows: int | None = None, cols: int | None = None, gap: float | None = None, margin: float | None = None) -> None:
		"""
		Change the current page's grid settings.

		A row or column change reallocates cells, so the selection is dropped.

		Args:
			rows: New row count, or None to keep.
			cols: New column count, or None to keep.
			gap: New gap in millimeters, or None to keep.
			margin: New margin in millimeters, or None to keep.
		"""
		page = self.current_page
		before = page.grid
		tlp.reflow.update_grid_settings(page, rows=rows, cols=cols, gap=gap, margin=margin)
		if page.grid.rows != before.rows or page.grid.cols != before.cols:
			self.selected_cell_id = None
		if page.grid != before:
			self.mark_dirty()

	#============================================
	def restore_overflow(self) -> int:
		moved = tlp.reflow.restore_overflow(self.current_page)
		if moved:
			self.mark_dirty()
		return moved

	#============================================
	def add_page(self) -> Page:
		"""
		Append a page with the last page's grid and show it.

		Returns:
			The new Page.
		"""
		page = tlp.reflow.add_page(self.document)
		self.current_page_index = len(self.document.pages) - 1
		self.selected_cell_id = None
		self.mark_dirty()
		return page

	#============================================
	def remove_page(self, index: int) -> Page:
		"""
		Remove a page, keeping the current page index on a valid page.

		Args:
			index: Page index.

		Returns:
			The removed Page.
		"""
		removed = tlp.reflow.remove_page(self.document, index)
		if self.current_page_index >= len(self.document.pages):
			self.current_page_index = len(self.document.pages) - 1
		elif self.current_page_index > index:
			self.current_page_index -= 1
		self.selected_cell_id = None
		self.mark_dirty()
		return removed

	#============================================
	def add_contents(self, contents: list[CellContent]) -> list[tuple[int, int]]:
		"""
		Place contents into the first empty cells, adding pages as needed.

		The view moves to the page that received the last content.

		Args:
			contents: Contents in drop order.

		Returns:
			List of (page_index, cell_index) positions.
		"""
		if not contents:
			return []
		positions = tlp.reflow.place_contents(self.document, contents)
		self.current_page_index = positions[-1][0]
		self.mark_dirty()
		return positions

	#============================================
	def add_files(self, paths: list[str | pathlib.Path]) -> tuple[list[tuple[int, int]], list[str]]:
		"""
		Read image files and place them like add_contents.

		Files that cannot be read or are not a supported image type are
		skipped and reported.

		Args:
			paths: Image file paths.

		Returns:
			Tuple of (positions, skipped messages).
		"""
		contents, skipped = load_image_files(paths)
		return (self.add_contents(contents), skipped)

	#============================================
	def set_page_size(self, page_size: PageSize | str) -> None:
		tlp.reflow.set_page_size(self.document, page_size)
		self.mark_dirty()

	#============================================
	def set_display(
		self,
		show_filenames: bool | None = None,
		show_grid_lines: bool | None = None,
		show_page_numbers: bool | None = None,
		title: str | None = None,
	) -> None:
		"""
		Change document display flags and title. None keeps a value.
		"""
		if show_filenames is not None:
			self.document.show_filenames = show_filenames
		if show_grid_lines is not None:
			self.document.show_grid_lines = show_grid_lines
		if show_page_numbers is not None:
			self.document.show_page_numbers = show_page_numbers
		if title is not None:
			self.document.title = title
		self.mark_dirty()


#============================================
def load_image_files(paths: list[str | pathlib.Path]) -> tuple[list[CellContent], list[str]]:
	"""
	Read image files into contents, collecting the ones that fail.

	Args:
		paths: Image file paths.

	Returns:
		Tuple of (contents in path order, skipped messages).
	"""
	contents: list[CellContent] = []
	skipped: list[str] = []
	for path in paths:
		try:
			contents.append(tlp.media.load_image_file(path))
		except (ValueError, OSError) as error:
			skipped.append(f"{path}: {error}")
	return (contents, skipped)
