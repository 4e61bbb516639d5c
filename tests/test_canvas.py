import pathlib

import pytest

import tile_layout_pro.canvas
import tile_layout_pro.config
import tile_layout_pro.geometry
import tile_layout_pro.session

import layout_fixtures


#============================================
def _canvas_with_contents(count: int) -> tile_layout_pro.canvas.CanvasAdapter:
	"""
	Build a canvas whose screen pixels equal page points.
	"""
	session = tile_layout_pro.session.LayoutSession()
	if count:
		session.add_contents([layout_fixtures.png_content(f"c{index}.png") for index in range(count)])
	canvas = tile_layout_pro.canvas.CanvasAdapter(session)
	canvas.scale = 1.0
	return canvas


#============================================
def _cell_center(canvas: tile_layout_pro.canvas.CanvasAdapter, index: int) -> tuple[float, float]:
	rect = canvas.screen_page().cells[index].rect
	return (rect.x + rect.width / 2.0, rect.y + rect.height / 2.0)


#============================================
def test_default_scale_follows_display_density() -> None:
	session = tile_layout_pro.session.LayoutSession()
	canvas = tile_layout_pro.canvas.CanvasAdapter(session)
	expected = tile_layout_pro.config.DISPLAY_PIXELS_PER_MM / tile_layout_pro.config.MM_TO_POINTS
	assert canvas.scale == pytest.approx(expected)
	page_width, _page_height = tile_layout_pro.geometry.page_size_points("A4")
	assert canvas.screen_page().width == pytest.approx(210.0 * 2.5)
	assert canvas.screen_page().width == pytest.approx(page_width * expected)

	canvas.set_zoom(2.0)
	assert canvas.scale == pytest.approx(expected * 2.0)
	with pytest.raises(ValueError):
		canvas.set_zoom(0.0)


#============================================
def test_hit_test_in_screen_space() -> None:
	"""
	Hit testing honors the canvas scale and offset.
	"""
	canvas = _canvas_with_contents(0)
	canvas.fit_to_box(1000.0, 1000.0)
	assert canvas.offset_x > 0.0
	screen = canvas.screen_page()
	for cell in screen.cells:
		center = (cell.rect.x + cell.rect.width / 2.0, cell.rect.y + cell.rect.height / 2.0)
		assert canvas.cell_at(*center) == cell.index
	assert canvas.cell_at(canvas.offset_x + 1.0, 1.0) is None
	assert canvas.cell_at(-50.0, -50.0) is None


#============================================
def test_click_selects_and_clears() -> None:
	canvas = _canvas_with_contents(2)
	cell_id = canvas.click(*_cell_center(canvas, 1))
	assert cell_id == canvas.session.current_page.cells[1].id
	selected = [cell.index for cell in canvas.screen_page().cells if cell.selected]
	assert selected == [1]
	assert canvas.click(1.0, 1.0) is None
	assert canvas.session.selected_cell_id is None


#============================================
def test_drag_reorder_swaps_cells() -> None:
	"""
	Dragging cell 0 onto cell 3 swaps their contents through the session.
	"""
	canvas = _canvas_with_contents(4)
	session = canvas.session
	session.dirty = False
	before = [cell.content for cell in session.current_page.cells]

	assert canvas.begin_drag(*_cell_center(canvas, 0)) is True
	assert canvas.drag_over(*_cell_center(canvas, 3)) == 3
	flags = [(cell.drag_source, cell.drop_target) for cell in canvas.screen_page().cells]
	assert flags[0] == (True, False)
	assert flags[3] == (False, True)
	assert canvas.drop(*_cell_center(canvas, 3)) is True

	after = [cell.content for cell in session.current_page.cells]
	assert after == [before[3], before[1], before[2], before[0]]
	assert session.dirty is True
	assert canvas.drag_source is None


#============================================
def test_drag_rules() -> None:
	canvas = _canvas_with_contents(1)
	# empty cells cannot be dragged
	assert canvas.begin_drag(*_cell_center(canvas, 2)) is False
	assert canvas.drop(*_cell_center(canvas, 0)) is False
	# dropping outside any cell or onto itself changes nothing
	assert canvas.begin_drag(*_cell_center(canvas, 0)) is True
	assert canvas.drop(1.0, 1.0) is False
	assert canvas.begin_drag(*_cell_center(canvas, 0)) is True
	assert canvas.drop(*_cell_center(canvas, 0)) is False
	assert canvas.session.current_page.cells[0].content.filename == "c0.png"


#============================================
def test_drop_files_on_cell_and_background(tmp_path: pathlib.Path) -> None:
	"""
	One file dropped on a cell replaces it; other drops fill empty cells.
	"""
	paths = []
	for index in range(3):
		path = tmp_path / f"drop{index}.png"
		path.write_bytes(layout_fixtures.png_bytes(color=(index * 50, 0, 0)))
		paths.append(path)
	canvas = _canvas_with_contents(1)
	session = canvas.session

	skipped = canvas.drop_files(*_cell_center(canvas, 0), [paths[0]])
	assert skipped == []
	assert session.current_page.cells[0].content.filename == "drop0.png"
	assert session.selected_cell_index() == 0

	skipped = canvas.drop_files(1.0, 1.0, [paths[1], paths[2], tmp_path / "nope.txt"])
	assert len(skipped) == 1
	names = [cell.content.filename if cell.content else None for cell in session.current_page.cells]
	assert names == ["drop0.png", "drop1.png", "drop2.png", None]


#============================================
def test_screen_items_scaled_from_plan() -> None:
	canvas = _canvas_with_contents(1)
	canvas.session.set_display(title="Board", show_page_numbers=True)
	canvas.scale = 2.0
	canvas.offset_x = 10.0
	screen = canvas.screen_page()
	plan = canvas.page_plan()
	assert screen.title.text == "Board"
	assert screen.title.font_size == pytest.approx(plan.title.font_size * 2.0)
	assert screen.page_number.text == "1/1"
	cell = screen.cells[0]
	assert cell.rect.x == pytest.approx(10.0 + plan.cells[0].rect.x * 2.0)
	assert cell.image_rect is not None
	assert cell.caption is not None
	assert cell.caption.text == "c0.png"
	assert screen.cells[1].dashed_border is True
