"""
CLI entry points for tile layout files.
"""

# Standard Library
import argparse
import pathlib
import time

# local repo modules
import tile_layout_pro as tlp
import tile_layout_pro.archive
import tile_layout_pro.config
import tile_layout_pro.errors
import tile_layout_pro.export
import tile_layout_pro.model
import tile_layout_pro.session
import tile_layout_pro.thumbnail


GridSettings = tlp.model.GridSettings
PageSize = tlp.model.PageSize
TileLayoutError = tlp.errors.TileLayoutError

DEFAULT_ROWS = tlp.config.DEFAULT_ROWS
DEFAULT_COLUMNS = tlp.config.DEFAULT_COLUMNS
DEFAULT_GAP_MM = tlp.config.DEFAULT_GAP_MM
DEFAULT_MARGIN_MM = tlp.config.DEFAULT_MARGIN_MM
DEFAULT_PAGE_SIZE = tlp.config.DEFAULT_PAGE_SIZE
PROGRESS_BAR_WIDTH = tlp.config.PROGRESS_BAR_WIDTH
DEFAULT_THUMBNAIL_SIZE = 256


#============================================
def print_progress(prefix: str, current: int, total: int) -> None:
	"""
	Print a simple progress bar.

	Args:
		prefix: Label text.
		current: Current count.
		total: Total count.
	"""
	if total <= 0:
		return
	percent = int(round((current / total) * 100.0))
	filled = int(round(PROGRESS_BAR_WIDTH * percent / 100.0))
	bar = "#" * filled + "-" * (PROGRESS_BAR_WIDTH - filled)
	print(f"{prefix} [{bar}] {current}/{total} ({percent}%)", end="\r")
	if current >= total:
		print()


#============================================
def print_missing_refs(missing_refs: list[str]) -> None:
	if not missing_refs:
		return
	print(f"Missing images: {len(missing_refs)}")
	for image_ref in missing_refs:
		print(f"  {image_ref}")


#============================================
def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
	"""
	Parse command line arguments.

	Args:
		argv: Argument list, default sys.argv.

	Returns:
		Parsed argparse namespace.
	"""
	parser = argparse.ArgumentParser(description="Tile image grid layouts: export, preview, and pack.")
	subparsers = parser.add_subparsers(dest="command", required=True)

	export_parser = subparsers.add_parser("export", help="Export a layout to PDF.")
	export_parser.add_argument("input_path", help="Layout file (.tlp or .json).")
	export_parser.add_argument("-o", "--output", dest="output_path", required=True, help="Output PDF path.")

	thumb_parser = subparsers.add_parser("thumbnail", help="Render a PNG preview of the first page.")
	thumb_parser.add_argument("input_path", help="Layout file (.tlp or .json).")
	thumb_parser.add_argument("-o", "--output", dest="output_path", required=True, help="Output PNG path.")
	thumb_parser.add_argument("-W", "--width", dest="width", type=int, default=DEFAULT_THUMBNAIL_SIZE, help="Box width in pixels.")
	thumb_parser.add_argument("-H", "--height", dest="height", type=int, default=DEFAULT_THUMBNAIL_SIZE, help="Box height in pixels.")

	pack_parser = subparsers.add_parser("pack", help="Lay out image files into a new layout file.")
	pack_parser.add_argument("inputs", nargs="+", help="Image files.")
	pack_parser.add_argument("-o", "--output", dest="output_path", required=True, help="Output layout path (.tlp or .json).")
	grid_group = pack_parser.add_argument_group("Grid")
	grid_group.add_argument("-r", "--rows", dest="rows", type=int, default=DEFAULT_ROWS, help="Rows per page.")
	grid_group.add_argument("-c", "--cols", dest="cols", type=int, default=DEFAULT_COLUMNS, help="Columns per page.")
	grid_group.add_argument("-g", "--gap", dest="gap", type=float, default=DEFAULT_GAP_MM, help="Gap between cells in mm.")
	grid_group.add_argument("-m", "--margin", dest="margin", type=float, default=DEFAULT_MARGIN_MM, help="Page margin in mm.")
	grid_group.add_argument(
		"-s",
		"--page-size",
		dest="page_size",
		choices=[size.value for size in PageSize],
		default=DEFAULT_PAGE_SIZE,
		help="Page size.",
	)
	display_group = pack_parser.add_argument_group("Display")
	display_group.add_argument("-t", "--title", dest="title", default="", help="Title drawn at the top of each page.")
	display_group.add_argument("-f", "--show-filenames", dest="show_filenames", action="store_true", help="Draw filename captions.")
	display_group.add_argument("-F", "--no-show-filenames", dest="show_filenames", action="store_false", help="Hide filename captions.")
	display_group.add_argument("-l", "--show-grid-lines", dest="show_grid_lines", action="store_true", help="Outline empty cells.")
	display_group.add_argument("-L", "--no-show-grid-lines", dest="show_grid_lines", action="store_false", help="Hide empty cell outlines.")
	display_group.add_argument("-n", "--show-page-numbers", dest="show_page_numbers", action="store_true", help="Draw page numbers.")
	display_group.add_argument("-N", "--no-show-page-numbers", dest="show_page_numbers", action="store_false", help="Hide page numbers.")
	pack_parser.set_defaults(
		show_filenames=True,
		show_grid_lines=True,
		show_page_numbers=False,
	)

	package_parser = subparsers.add_parser("package", help="Collect a layout's images into a zip or folder.")
	package_parser.add_argument("input_path", help="Layout file (.tlp or .json).")
	package_parser.add_argument("-o", "--output", dest="output_path", required=True, help="Output zip or folder path.")
	package_parser.add_argument("-d", "--folder", dest="as_folder", action="store_true", help="Write a folder instead of a zip.")

	info_parser = subparsers.add_parser("info", help="Print a summary of a layout file.")
	info_parser.add_argument("input_path", help="Layout file (.tlp or .json).")

	args = parser.parse_args(argv)
	return args


#============================================
def run_export(args: argparse.Namespace) -> None:
	"""
	Export a layout file to PDF.

	Args:
		args: Parsed argparse namespace.
	"""
	print(f"Layout: {args.input_path}")
	print(f"Output PDF: {args.output_path}")
	start_time = time.perf_counter()
	loaded = tlp.archive.load_layout(args.input_path)
	print_missing_refs(loaded.missing_refs)
	load_end = time.perf_counter()

	def progress(current: int, total: int) -> None:
		print_progress("Pages", current, total)

	result = tlp.export.export_pdf(loaded.document, args.output_path, progress=progress)
	export_end = time.perf_counter()
	print(f"Pages written: {result.pages}")
	print(f"Images embedded: {result.images_embedded}")
	print(f"Vector images: {result.vector_images}")
	if result.skipped:
		print(f"Images skipped: {len(result.skipped)}")
		for message in result.skipped:
			print(f"  {message}")
	print(
		"Timing: load={:.2f}s export={:.2f}s".format(
			load_end - start_time,
			export_end - load_end,
		)
	)


#============================================
def run_thumbnail(args: argparse.Namespace) -> None:
	"""
	Render the first page of a layout file to PNG.

	Args:
		args: Parsed argparse namespace.
	"""
	image = tlp.thumbnail.render_archive_thumbnail(args.input_path, args.width, args.height)
	output_path = pathlib.Path(args.output_path)
	image.save(output_path, format="PNG")
	print(f"Thumbnail written: {output_path} ({image.width}x{image.height})")


#============================================
def run_pack(args: argparse.Namespace) -> None:
	"""
	Build a layout file from image files.

	Args:
		args: Parsed argparse namespace.
	"""
	grid = GridSettings(rows=args.rows, cols=args.cols, gap=args.gap, margin=args.margin)
	session = tlp.session.LayoutSession()
	session.new(args.page_size)
	session.set_grid(rows=grid.rows, cols=grid.cols, gap=grid.gap, margin=grid.margin)
	session.set_display(
		show_filenames=args.show_filenames,
		show_grid_lines=args.show_grid_lines,
		show_page_numbers=args.show_page_numbers,
		title=args.title,
	)
	print(f"Grid: {grid.rows}x{grid.cols} gap={grid.gap}mm margin={grid.margin}mm")
	print(f"Page size: {args.page_size}")
	positions, skipped = session.add_files(args.inputs)
	print(f"Images placed: {len(positions)}")
	if skipped:
		print(f"Files skipped: {len(skipped)}")
		for message in skipped:
			print(f"  {message}")
	output_path = session.save(args.output_path)
	print(f"Pages: {len(session.document.pages)}")
	print(f"Layout written: {output_path}")


#============================================
def run_package(args: argparse.Namespace) -> None:
	"""
	Collect a layout's images into a zip or folder.

	Args:
		args: Parsed argparse namespace.
	"""
	loaded = tlp.archive.load_layout(args.input_path)
	print_missing_refs(loaded.missing_refs)
	as_zip = not args.as_folder
	written = tlp.archive.package_layout(loaded.document, args.output_path, as_zip=as_zip)
	print(f"Images collected: {written}")
	print(f"Package written: {args.output_path}")


#============================================
def run_info(args: argparse.Namespace) -> None:
	"""
	Print a summary of a layout file.

	Args:
		args: Parsed argparse namespace.
	"""
	loaded = tlp.archive.load_layout(args.input_path)
	document = loaded.document
	print(f"Layout: {args.input_path}")
	print(f"Page size: {document.page_size.value}")
	print(f"Title: {document.title}")
	print(f"Show filenames: {document.show_filenames}")
	print(f"Show grid lines: {document.show_grid_lines}")
	print(f"Show page numbers: {document.show_page_numbers}")
	print(f"Pages: {len(document.pages)}")
	for page_index, page in enumerate(document.pages):
		grid = page.grid
		placed = len(page.placed_contents())
		print(
			f"  Page {page_index + 1}: {grid.rows}x{grid.cols} gap={grid.gap}mm margin={grid.margin}mm"
			f" placed={placed}/{grid.capacity} overflow={len(page.overflow)}"
		)
	print(f"Contents: {document.content_count()}")
	print_missing_refs(loaded.missing_refs)


COMMANDS = {
	"export": run_export,
	"thumbnail": run_thumbnail,
	"pack": run_pack,
	"package": run_package,
	"info": run_info,
}


#============================================
def main(argv: list[str] | None = None) -> int:
	"""
	Main entry point.

	Args:
		argv: Argument list, default sys.argv.

	Returns:
		Process exit code.
	"""
	args = parse_args(argv)
	try:
		COMMANDS[args.command](args)
	except TileLayoutError as error:
		print(f"Error: {error.message}")
		return 1
	return 0
