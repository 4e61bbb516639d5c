import pytest

import tile_layout_pro.config
import tile_layout_pro.errors
import tile_layout_pro.geometry
import tile_layout_pro.model


Rect = tile_layout_pro.geometry.Rect
GridSettings = tile_layout_pro.model.GridSettings
PageSize = tile_layout_pro.model.PageSize
MM_TO_POINTS = tile_layout_pro.config.MM_TO_POINTS

GRID_CASES = [
	GridSettings(rows=1, cols=1, gap=0.0, margin=0.0),
	GridSettings(rows=2, cols=2, gap=5.0, margin=10.0),
	GridSettings(rows=3, cols=4, gap=2.5, margin=7.0),
	GridSettings(rows=7, cols=5, gap=0.0, margin=0.0),
	GridSettings(rows=10, cols=10, gap=1.0, margin=1.0),
	GridSettings(rows=1, cols=6, gap=12.0, margin=3.5),
]


#============================================
def test_page_sizes_in_points() -> None:
	"""
	Page sizes convert millimeters with the fixed constant.
	"""
	a4_width, a4_height = tile_layout_pro.geometry.page_size_points(PageSize.A4)
	a3_width, a3_height = tile_layout_pro.geometry.page_size_points(PageSize.A3)
	assert a4_width == 210 * 2.834645669
	assert a4_height == 297 * 2.834645669
	assert a3_width == 297 * 2.834645669
	assert a3_height == 420 * 2.834645669
	assert tile_layout_pro.geometry.page_size_points("A3") == (a3_width, a3_height)


#============================================
def test_unknown_page_size_rejected() -> None:
	with pytest.raises(ValueError):
		tile_layout_pro.geometry.page_size_points("Letter")


#============================================
@pytest.mark.parametrize("page_size", list(PageSize))
@pytest.mark.parametrize("grid", GRID_CASES)
def test_cells_gaps_and_margins_span_page(page_size: PageSize, grid: GridSettings) -> None:
	"""
	Cells, gaps and margins add up to the full page in both directions.
	"""
	page_width, page_height = tile_layout_pro.geometry.page_size_points(page_size)
	cell_width, cell_height = tile_layout_pro.geometry.cell_size(page_size, grid)
	gap = grid.gap * MM_TO_POINTS
	margin = grid.margin * MM_TO_POINTS
	total_width = cell_width * grid.cols + gap * (grid.cols - 1) + 2 * margin
	total_height = cell_height * grid.rows + gap * (grid.rows - 1) + 2 * margin
	assert abs(total_width - page_width) < 1e-6
	assert abs(total_height - page_height) < 1e-6


#============================================
def test_cell_rects_row_major() -> None:
	"""
	Rectangles run left to right, then top to bottom.
	"""
	grid = GridSettings(rows=2, cols=3, gap=5.0, margin=10.0)
	rects = tile_layout_pro.geometry.cell_rects(PageSize.A4, grid)
	assert len(rects) == 6
	margin = 10.0 * MM_TO_POINTS
	gap = 5.0 * MM_TO_POINTS
	assert rects[0].x == pytest.approx(margin)
	assert rects[0].y == pytest.approx(margin)
	assert rects[1].x == pytest.approx(rects[0].right + gap)
	assert rects[1].y == pytest.approx(rects[0].y)
	assert rects[3].x == pytest.approx(rects[0].x)
	assert rects[3].y == pytest.approx(rects[0].bottom + gap)
	for rect in rects:
		assert rect.width == pytest.approx(rects[0].width)
		assert rect.height == pytest.approx(rects[0].height)


#============================================
def test_margin_too_large_raises_geometry_error() -> None:
	grid = GridSettings(rows=1, cols=1, gap=0.0, margin=200.0)
	with pytest.raises(tile_layout_pro.errors.GeometryError):
		tile_layout_pro.geometry.cell_rects(PageSize.A4, grid)


#============================================
def test_gap_too_large_raises_geometry_error() -> None:
	grid = GridSettings(rows=1, cols=20, gap=15.0, margin=0.0)
	with pytest.raises(tile_layout_pro.errors.GeometryError):
		tile_layout_pro.geometry.cell_size(PageSize.A4, grid)


#============================================
def test_image_fit_rect_wide_and_tall() -> None:
	"""
	A wide image touches the sides, a tall image touches top and bottom.
	"""
	container = Rect(0.0, 0.0, 100.0, 50.0)
	wide = tile_layout_pro.geometry.image_fit_rect(container, 4.0)
	assert wide.width == pytest.approx(100.0)
	assert wide.height == pytest.approx(25.0)
	assert wide.x == pytest.approx(0.0)
	assert wide.y == pytest.approx(12.5)

	tall = tile_layout_pro.geometry.image_fit_rect(container, 0.5)
	assert tall.width == pytest.approx(25.0)
	assert tall.height == pytest.approx(50.0)
	assert tall.x == pytest.approx(37.5)
	assert tall.y == pytest.approx(0.0)


#============================================
def test_image_fit_rect_offset_container() -> None:
	container = Rect(10.0, 20.0, 100.0, 50.0)
	fitted = tile_layout_pro.geometry.image_fit_rect(container, 4.0)
	assert fitted.x == pytest.approx(10.0)
	assert fitted.y == pytest.approx(32.5)


#============================================
def test_image_fit_rect_rejects_bad_input() -> None:
	with pytest.raises(ValueError):
		tile_layout_pro.geometry.image_fit_rect(Rect(0.0, 0.0, 10.0, 10.0), 0.0)
	with pytest.raises(tile_layout_pro.errors.GeometryError):
		tile_layout_pro.geometry.image_fit_rect(Rect(0.0, 0.0, 10.0, -2.0), 1.0)


#============================================
def test_caption_strip_never_overlaps_image() -> None:
	"""
	The caption takes a fixed strip off the bottom of the cell.
	"""
	cell = Rect(5.0, 5.0, 100.0, 80.0)
	image_area, caption = tile_layout_pro.geometry.split_caption(cell, True)
	assert caption is not None
	assert caption.height == tile_layout_pro.config.CAPTION_HEIGHT
	assert image_area.height == pytest.approx(80.0 - 12.0)
	assert caption.y == pytest.approx(image_area.bottom)
	assert caption.bottom == pytest.approx(cell.bottom)
	fitted = tile_layout_pro.geometry.image_fit_rect(image_area, 0.2)
	assert fitted.bottom <= caption.y + 1e-9

	same, none = tile_layout_pro.geometry.split_caption(cell, False)
	assert same == cell
	assert none is None


#============================================
def test_hit_test_cells_and_gaps() -> None:
	grid = GridSettings(rows=2, cols=2, gap=5.0, margin=10.0)
	rects = tile_layout_pro.geometry.cell_rects(PageSize.A4, grid)
	for index, rect in enumerate(rects):
		center_x = rect.x + rect.width / 2.0
		center_y = rect.y + rect.height / 2.0
		assert tile_layout_pro.geometry.hit_test(rects, center_x, center_y) == index
	# margin corner and the gap between the two top cells
	assert tile_layout_pro.geometry.hit_test(rects, 1.0, 1.0) is None
	gap_x = rects[0].right + 1.0
	assert tile_layout_pro.geometry.hit_test(rects, gap_x, rects[0].y + 5.0) is None
	# shared edges belong to one cell only
	assert tile_layout_pro.geometry.hit_test(rects, rects[1].x, rects[1].y) == 1


#============================================
def test_fit_scale_and_flip() -> None:
	page_width, page_height = tile_layout_pro.geometry.page_size_points(PageSize.A4)
	scale = tile_layout_pro.geometry.fit_scale(page_width, page_height, 100.0, 100.0)
	assert scale == pytest.approx(100.0 / page_height)
	with pytest.raises(tile_layout_pro.errors.GeometryError):
		tile_layout_pro.geometry.fit_scale(page_width, page_height, 0.0, 100.0)

	flipped = tile_layout_pro.geometry.flip_rect(Rect(10.0, 20.0, 30.0, 40.0), 100.0)
	assert flipped == Rect(10.0, 40.0, 30.0, 40.0)


#============================================
@pytest.mark.parametrize("value", [float("nan"), float("inf")])
def test_grid_rejects_non_finite_gap_and_margin(value: float) -> None:
	with pytest.raises(ValueError):
		GridSettings(rows=1, cols=1, gap=value, margin=0.0)
	with pytest.raises(ValueError):
		GridSettings(rows=1, cols=1, gap=0.0, margin=value)
