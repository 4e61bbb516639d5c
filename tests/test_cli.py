import json
import pathlib
import zipfile

import PIL.Image
import pypdf

import tile_layout_pro.archive
import tile_layout_pro.cli

import layout_fixtures


#============================================
def _write_images(folder: pathlib.Path, count: int) -> list[str]:
	paths = []
	for index in range(count):
		path = folder / f"tile{index}.png"
		path.write_bytes(layout_fixtures.png_bytes(color=(0, index * 40, 200)))
		paths.append(str(path))
	return paths


#============================================
def test_pack_then_info_export_thumbnail(tmp_path: pathlib.Path, capsys) -> None:
	"""
	Pack images into a container, then inspect, export and preview it.
	"""
	images = _write_images(tmp_path, 3)
	layout_path = tmp_path / "board.tlp"
	code = tile_layout_pro.cli.main(
		["pack", *images, "-o", str(layout_path), "--rows", "1", "--cols", "2", "--title", "Board", "-n"]
	)
	assert code == 0
	document = tile_layout_pro.archive.load_layout(layout_path).document
	assert len(document.pages) == 2
	assert document.title == "Board"
	assert document.show_page_numbers is True
	assert document.pages[1].grid.cols == 2
	assert "Images placed: 3" in capsys.readouterr().out

	assert tile_layout_pro.cli.main(["info", str(layout_path)]) == 0
	output = capsys.readouterr().out
	assert "Pages: 2" in output
	assert "Contents: 3" in output

	pdf_path = tmp_path / "board.pdf"
	assert tile_layout_pro.cli.main(["export", str(layout_path), "-o", str(pdf_path)]) == 0
	assert "Pages written: 2" in capsys.readouterr().out
	assert len(pypdf.PdfReader(str(pdf_path)).pages) == 2

	png_path = tmp_path / "board.png"
	assert tile_layout_pro.cli.main(["thumbnail", str(layout_path), "-o", str(png_path), "-W", "120", "-H", "120"]) == 0
	with PIL.Image.open(png_path) as image:
		assert image.height <= 120
		assert image.width <= 120


#============================================
def test_package_command(tmp_path: pathlib.Path) -> None:
	images = _write_images(tmp_path, 2)
	layout_path = tmp_path / "pack.json"
	assert tile_layout_pro.cli.main(["pack", *images, "-o", str(layout_path)]) == 0
	zip_path = tmp_path / "collected.zip"
	assert tile_layout_pro.cli.main(["package", str(layout_path), "-o", str(zip_path)]) == 0
	with zipfile.ZipFile(zip_path) as archive:
		listing = json.loads(archive.read("layout.json"))
		assert sorted(archive.namelist()) == ["layout.json", "tile0.png", "tile1.png"]
	assert listing["pages"][0]["cells"][0]["filename"] == "tile0.png"

	folder = tmp_path / "collected"
	assert tile_layout_pro.cli.main(["package", str(layout_path), "-o", str(folder), "--folder"]) == 0
	assert (folder / "tile1.png").exists()


#============================================
def test_bad_layout_reports_error(tmp_path: pathlib.Path, capsys) -> None:
	bad_path = tmp_path / "bad.tlp"
	bad_path.write_bytes(b"not a zip")
	assert tile_layout_pro.cli.main(["info", str(bad_path)]) == 1
	assert "Error: Not a valid container" in capsys.readouterr().out

	assert tile_layout_pro.cli.main(["info", str(tmp_path / "absent.tlp")]) == 1
	assert "Error: Not a valid container" in capsys.readouterr().out


#============================================
def test_print_progress(capsys) -> None:
	tile_layout_pro.cli.print_progress("Pages", 1, 2)
	tile_layout_pro.cli.print_progress("Pages", 2, 2)
	tile_layout_pro.cli.print_progress("Pages", 0, 0)
	output = capsys.readouterr().out
	assert "1/2 (50%)" in output
	assert "2/2 (100%)" in output
	assert output.endswith("\n")
