import pytest

import tile_layout_pro.model
import tile_layout_pro.reflow

import layout_fixtures


GridSettings = tile_layout_pro.model.GridSettings
PageLayout = tile_layout_pro.model.PageLayout


#============================================
def cell_contents(page: tile_layout_pro.model.Page) -> list:
	return [cell.content for cell in page.cells]


#============================================
def test_shrink_then_grow_restores_order() -> None:
	"""
	2x2 to 1x1 parks three contents in overflow; 2x2 again puts them back.
	"""
	contents = [layout_fixtures.token_content(index) for index in range(4)]
	page = layout_fixtures.filled_page(contents)

	tile_layout_pro.reflow.set_page_grid(page, 1, 1)
	assert len(page.cells) == 1
	assert page.cells[0].content is contents[0]
	assert list(page.overflow) == contents[1:]

	tile_layout_pro.reflow.set_page_grid(page, 2, 2)
	assert cell_contents(page) == contents
	assert page.overflow == ()


#============================================
def test_reflow_allocates_fresh_cell_ids() -> None:
	contents = [layout_fixtures.token_content(index) for index in range(3)]
	page = layout_fixtures.filled_page(contents)
	old_ids = {cell.id for cell in page.cells}
	tile_layout_pro.reflow.set_page_grid(page, 3, 3)
	new_ids = {cell.id for cell in page.cells}
	assert len(new_ids) == 9
	assert not old_ids & new_ids
	assert cell_contents(page)[:3] == contents
	assert cell_contents(page)[3:] == [None] * 6


#============================================
def test_reflow_compacts_holes_and_keeps_gap_margin() -> None:
	"""
	Empty cells are skipped when building the canonical order.
	"""
	first = layout_fixtures.token_content(0)
	last = layout_fixtures.token_content(3)
	page = layout_fixtures.filled_page([first, None, None, last])
	page.layout = PageLayout(
		grid=GridSettings(rows=2, cols=2, gap=3.0, margin=4.0),
		cells=page.cells,
	)
	tile_layout_pro.reflow.set_page_grid(page, 1, 2)
	assert cell_contents(page) == [first, last]
	assert page.grid.gap == 3.0
	assert page.grid.margin == 4.0


#============================================
def test_layout_always_matches_grid() -> None:
	page = layout_fixtures.filled_page([layout_fixtures.token_content(0)])
	for rows, cols in [(1, 1), (3, 2), (5, 5), (2, 7)]:
		tile_layout_pro.reflow.set_page_grid(page, rows, cols)
		assert len(page.cells) == page.grid.rows * page.grid.cols
		assert len(page.all_contents()) == 1


#============================================
def test_invalid_grid_rejected_without_change() -> None:
	page = layout_fixtures.filled_page([layout_fixtures.token_content(0)])
	before = page.layout
	with pytest.raises(ValueError):
		tile_layout_pro.reflow.set_page_grid(page, 0, 2)
	with pytest.raises(ValueError):
		tile_layout_pro.reflow.update_grid_settings(page, gap=-1.0)
	assert page.layout is before


#============================================
def test_gap_change_keeps_cells() -> None:
	"""
	A gap or margin change keeps cell ids and contents in place.
	"""
	contents = [layout_fixtures.token_content(0), None, layout_fixtures.token_content(2)]
	page = layout_fixtures.filled_page(contents)
	old_cells = page.cells
	tile_layout_pro.reflow.update_grid_settings(page, gap=8.0, margin=2.0)
	assert page.cells == old_cells
	assert page.grid == GridSettings(rows=2, cols=2, gap=8.0, margin=2.0)

	tile_layout_pro.reflow.update_grid_settings(page, rows=1)
	assert page.grid.rows == 1
	assert cell_contents(page) == [contents[0], contents[2]]


#============================================
def test_restore_overflow_fills_empty_cells() -> None:
	contents = [layout_fixtures.token_content(index) for index in range(3)]
	page = layout_fixtures.filled_page([contents[0]])
	page.layout = PageLayout(grid=page.grid, cells=page.cells, overflow=(contents[1], contents[2]))
	moved = tile_layout_pro.reflow.restore_overflow(page)
	assert moved == 2
	assert cell_contents(page) == [contents[0], contents[1], contents[2], None]
	assert page.overflow == ()
	assert tile_layout_pro.reflow.restore_overflow(page) == 0


#============================================
def test_restore_overflow_keeps_grid_size() -> None:
	contents = [layout_fixtures.token_content(index) for index in range(4)]
	page = layout_fixtures.filled_page(contents)
	tile_layout_pro.reflow.set_page_grid(page, 1, 1)
	assert tile_layout_pro.reflow.restore_overflow(page) == 0
	assert len(page.cells) == 1
	assert len(page.overflow) == 3


#============================================
def test_move_cell_is_its_own_inverse() -> None:
	"""
	Moving index 0 to 3 swaps their contents; repeating restores them.
	"""
	content_x = layout_fixtures.token_content(0)
	content_y = layout_fixtures.token_content(3)
	page = layout_fixtures.filled_page([content_x, None, None, content_y])
	ids = [cell.id for cell in page.cells]

	tile_layout_pro.reflow.move_cell(page, 0, 3)
	assert page.cells[0].content is content_y
	assert page.cells[3].content is content_x
	assert [cell.id for cell in page.cells] == ids

	tile_layout_pro.reflow.move_cell(page, 0, 3)
	assert page.cells[0].content is content_x
	assert page.cells[3].content is content_y


#============================================
def test_move_cell_same_index_and_bounds() -> None:
	page = layout_fixtures.filled_page([layout_fixtures.token_content(0)])
	before = page.layout
	tile_layout_pro.reflow.move_cell(page, 1, 1)
	assert page.layout is before
	with pytest.raises(IndexError):
		tile_layout_pro.reflow.move_cell(page, 0, 4)
	with pytest.raises(IndexError):
		tile_layout_pro.reflow.set_cell_content(page, -1, None)


#============================================
def test_swap_cells_across_pages() -> None:
	content_a = layout_fixtures.token_content(0)
	content_b = layout_fixtures.token_content(1)
	page_a = layout_fixtures.filled_page([content_a])
	page_b = layout_fixtures.filled_page([None, content_b])
	tile_layout_pro.reflow.swap_cells(page_a, 0, page_b, 1)
	assert page_a.cells[0].content is content_b
	assert page_b.cells[1].content is content_a
	tile_layout_pro.reflow.swap_cells(page_a, 0, page_a, 2)
	assert page_a.cells[0].content is None
	assert page_a.cells[2].content is content_b


#============================================
def test_set_cell_content_replaces() -> None:
	page = layout_fixtures.filled_page([layout_fixtures.token_content(0)])
	replacement = layout_fixtures.token_content(9)
	tile_layout_pro.reflow.set_cell_content(page, 0, replacement)
	assert page.cells[0].content is replacement
	tile_layout_pro.reflow.set_cell_content(page, 0, None)
	assert page.cells[0].content is None


#============================================
def test_place_contents_fills_holes_then_adds_pages() -> None:
	"""
	Dropped contents fill empty cells in order, then spill onto new pages.
	"""
	document = tile_layout_pro.model.new_document()
	existing = layout_fixtures.token_content(100)
	tile_layout_pro.reflow.set_cell_content(document.pages[0], 1, existing)
	contents = [layout_fixtures.token_content(index) for index in range(6)]

	positions = tile_layout_pro.reflow.place_contents(document, contents)
	assert positions == [(0, 0), (0, 2), (0, 3), (1, 0), (1, 1), (1, 2)]
	assert len(document.pages) == 2
	assert document.pages[1].grid == document.pages[0].grid
	assert cell_contents(document.pages[0]) == [contents[0], existing, contents[1], contents[2]]
	assert cell_contents(document.pages[1]) == [contents[3], contents[4], contents[5], None]
	assert document.content_count() == 7


#============================================
def test_add_and_remove_pages() -> None:
	document = tile_layout_pro.model.new_document()
	tile_layout_pro.reflow.set_page_grid(document.pages[0], 3, 1)
	page = tile_layout_pro.reflow.add_page(document)
	assert page.grid.rows == 3
	assert page.grid.cols == 1
	removed = tile_layout_pro.reflow.remove_page(document, 1)
	assert removed is page
	with pytest.raises(ValueError):
		tile_layout_pro.reflow.remove_page(document, 0)
	with pytest.raises(IndexError):
		tile_layout_pro.reflow.remove_page(document, 5)


#============================================
def test_find_cell_and_page_size() -> None:
	document = tile_layout_pro.model.new_document()
	page = document.pages[0]
	assert tile_layout_pro.reflow.find_cell(document, page.cells[3].id) == (0, 3)
	assert tile_layout_pro.reflow.find_cell(document, "cell-missing") is None
	tile_layout_pro.reflow.set_page_size(document, "A3")
	assert document.page_size == tile_layout_pro.model.PageSize.A3
	assert len(page.cells) == 4
