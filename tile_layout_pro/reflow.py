"""
Grid reflow and cell editing.

No operation here creates or destroys a CellContent except an explicit
replace (set_cell_content) or page removal. Each change builds a new
PageLayout and swaps it onto the page in a single assignment.
"""

# Standard Library
import dataclasses

# local repo modules
import tile_layout_pro as tlp
import tile_layout_pro.model


Cell = tlp.model.Cell
CellContent = tlp.model.CellContent
Document = tlp.model.Document
GridSettings = tlp.model.GridSettings
Page = tlp.model.Page
PageLayout = tlp.model.PageLayout
PageSize = tlp.model.PageSize


#============================================
def check_cell_index(page: Page, index: int) -> None:
	"""
	Validate a cell index for a page.

	Args:
		page: Page to check against.
		index: Cell index.
	"""
	if index < 0 or index >= len(page.cells):
		raise IndexError(f"Cell index {index} out of range for {len(page.cells)} cells")


#============================================
def check_page_index(document: Document, index: int) -> None:
	if index < 0 or index >= len(document.pages):
		raise IndexError(f"Page index {index} out of range for {len(document.pages)} pages")


#============================================
def distribute(
	contents: list[CellContent],
	grid: GridSettings,
) -> PageLayout:
	"""
	Place contents into fresh cells in order, parking the rest in overflow.

	Args:
		contents: Contents in canonical order.
		grid: Grid for the new layout.

	Returns:
		New PageLayout.
	"""
	capacity = grid.capacity
	cells = tlp.model.make_cells(capacity)
	placed = contents[:capacity]
	filled = tuple(
		dataclasses.replace(cell, content=placed[index]) if index < len(placed) else cell
		for index, cell in enumerate(cells)
	)
	overflow = tuple(contents[capacity:])
	return PageLayout(grid=grid, cells=filled, overflow=overflow)


#============================================
def set_page_grid(page: Page, new_rows: int, new_cols: int) -> None:
	"""
	Resize a page's grid without losing any content.

	Placed contents (in index order) followed by the existing overflow form
	the canonical order. Fresh cells are filled from it in order, and what
	does not fit becomes the new overflow.

	Args:
		page: Page to reflow.
		new_rows: New row count.
		new_cols: New column count.
	"""
	layout = page.layout
	grid = dataclasses.replace(layout.grid, rows=new_rows, cols=new_cols)
	placed = [cell.content for cell in layout.cells if cell.content is not None]
	canonical = placed + list(layout.overflow)
	page.layout = distribute(canonical, grid)


#============================================
def update_grid_settings(
	page: Page,
	rows: int | None = None,
	cols: int | None = None,
	gap: float | None = None,
	margin: float | None = None,
) -> None:
	"""
	Change any grid field of a page.

	A row or column change reflows the page. A gap or margin change keeps
	the current cells and their positions.

	Args:
		page: Page to update.
		rows: New row count, or None to keep.
		cols: New column count, or None to keep.
		gap: New gap in millimeters, or None to keep.
		margin: New margin in millimeters, or None to keep.
	"""
	layout = page.layout
	current = layout.grid
	grid = GridSettings(
		rows=current.rows if rows is None else rows,
		cols=current.cols if cols is None else cols,
		gap=current.gap if gap is None else gap,
		margin=current.margin if margin is None else margin,
	)
	if grid.rows == current.rows and grid.cols == current.cols:
		page.layout = dataclasses.replace(layout, grid=grid)
		return
	placed = [cell.content for cell in layout.cells if cell.content is not None]
	page.layout = distribute(placed + list(layout.overflow), grid)


#============================================
def restore_overflow(page: Page) -> int:
	"""
	Move overflow contents into empty cells without resizing the grid.

	Args:
		page: Page to fill.

	Returns:
		Number of contents moved out of overflow.
	"""
	layout = page.layout
	pending = list(layout.overflow)
	cells: list[Cell] = []
	moved = 0
	for cell in layout.cells:
		if cell.content is None and moved < len(pending):
			cells.append(dataclasses.replace(cell, content=pending[moved]))
			moved += 1
		else:
			cells.append(cell)
	if moved == 0:
		return 0
	page.layout = PageLayout(grid=layout.grid, cells=tuple(cells), overflow=tuple(pending[moved:]))
	return moved


#============================================
def set_cell_content(page: Page, index: int, content: CellContent | None) -> None:
	"""
	Replace the content of one cell.

	Args:
		page: Page holding the cell.
		index: Cell index.
		content: New content, or None to empty the cell.
	"""
	check_cell_index(page, index)
	layout = page.layout
	cells = list(layout.cells)
	cells[index] = dataclasses.replace(cells[index], content=content)
	page.layout = dataclasses.replace(layout, cells=tuple(cells))


#============================================
def move_cell(page: Page, from_index: int, to_index: int) -> None:
	"""
	Swap the contents of two cells on the same page.

	Calling it twice with the same arguments restores the original layout.

	Args:
		page: Page holding both cells.
		from_index: Dragged cell index.
		to_index: Drop target index.
	"""
	check_cell_index(page, from_index)
	check_cell_index(page, to_index)
	if from_index == to_index:
		return
	layout = page.layout
	cells = list(layout.cells)
	from_content = cells[from_index].content
	cells[from_index] = dataclasses.replace(cells[from_index], content=cells[to_index].content)
	cells[to_index] = dataclasses.replace(cells[to_index], content=from_content)
	page.layout = dataclasses.replace(layout, cells=tuple(cells))


#============================================
def swap_cells(from_page: Page, from_index: int, to_page: Page, to_index: int) -> None:
	"""
	Swap the contents of two cells that may be on different pages.

	Args:
		from_page: Page of the dragged cell.
		from_index: Dragged cell index.
		to_page: Page of the drop target.
		to_index: Drop target index.
	"""
	if from_page is to_page:
		move_cell(from_page, from_index, to_index)
		return
	check_cell_index(from_page, from_index)
	check_cell_index(to_page, to_index)
	from_layout = from_page.layout
	to_layout = to_page.layout
	from_cells = list(from_layout.cells)
	to_cells = list(to_layout.cells)
	moving = from_cells[from_index].content
	from_cells[from_index] = dataclasses.replace(from_cells[from_index], content=to_cells[to_index].content)
	to_cells[to_index] = dataclasses.replace(to_cells[to_index], content=moving)
	from_page.layout = dataclasses.replace(from_layout, cells=tuple(from_cells))
	to_page.layout = dataclasses.replace(to_layout, cells=tuple(to_cells))


#============================================
def add_page(document: Document, grid: GridSettings | None = None) -> Page:
	"""
	Append an empty page.

	Args:
		document: Document to extend.
		grid: Grid for the new page, default the last page's grid.

	Returns:
		The new Page.
	"""
	if grid is None and document.pages:
		grid = document.pages[-1].grid
	page = tlp.model.make_page(grid)
	document.pages.append(page)
	return page


#============================================
def remove_page(document: Document, index: int) -> Page:
	"""
	Remove a page and everything on it.

	The last remaining page cannot be removed.

	Args:
		document: Document to edit.
		index: Page index.

	Returns:
		The removed Page.
	"""
	check_page_index(document, index)
	if len(document.pages) <= 1:
		raise ValueError("A document must keep at least one page")
	return document.pages.pop(index)


#============================================
def place_contents(document: Document, contents: list[CellContent]) -> list[tuple[int, int]]:
	"""
	Drop a batch of contents into the first empty cells.

	Empty cells are filled page by page in index order. Contents left over
	go onto new pages that copy the last page's grid.

	Args:
		document: Document to fill.
		contents: Contents to place, in order.

	Returns:
		List of (page_index, cell_index) where each content landed.
	"""
	pending = list(contents)
	positions: list[tuple[int, int]] = []
	for page_index, page in enumerate(document.pages):
		if not pending:
			break
		layout = page.layout
		cells = list(layout.cells)
		changed = False
		for cell_index, cell in enumerate(cells):
			if not pending:
				break
			if cell.content is None:
				cells[cell_index] = dataclasses.replace(cell, content=pending.pop(0))
				positions.append((page_index, cell_index))
				changed = True
		if changed:
			page.layout = dataclasses.replace(layout, cells=tuple(cells))
	while pending:
		page = add_page(document)
		page_index = len(document.pages) - 1
		count = min(len(pending), page.grid.capacity)
		batch, pending = pending[:count], pending[count:]
		page.layout = distribute(batch, page.grid)
		positions.extend((page_index, cell_index) for cell_index in range(count))
	return positions


#============================================
def set_page_size(document: Document, page_size: PageSize | str) -> None:
	"""
	Change the document page size; grids and contents are untouched.
	"""
	document.page_size = PageSize(page_size)


#============================================
def find_cell(document: Document, cell_id: str) -> tuple[int, int] | None:
	"""
	Locate a cell by id.

	Args:
		document: Document to search.
		cell_id: Cell identifier.

	Returns:
		Tuple of (page_index, cell_index), or None if not found.
	"""
	for page_index, page in enumerate(document.pages):
		for cell_index, cell in enumerate(page.cells):
			if cell.id == cell_id:
				return (page_index, cell_index)
	return None
