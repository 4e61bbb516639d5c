"""
Layout containers (.tlp), legacy JSON manifests, and image packages.

A container is a zip archive holding layout.json plus one file per
distinct image payload under images/. The manifest refers to images by
name ("image_0.png"); identical bytes are stored once even when several
cells, possibly with different filenames, show them.
"""

# Standard Library
import dataclasses
import io
import json
import pathlib
import zipfile

# local repo modules
import tile_layout_pro as tlp
import tile_layout_pro.config
import tile_layout_pro.errors
import tile_layout_pro.media
import tile_layout_pro.model


CellContent = tlp.model.CellContent
Cell = tlp.model.Cell
Document = tlp.model.Document
GridSettings = tlp.model.GridSettings
Page = tlp.model.Page
PageLayout = tlp.model.PageLayout
PageSize = tlp.model.PageSize
ViewPreferences = tlp.config.ViewPreferences
FormatError = tlp.errors.FormatError
ContentResolutionError = tlp.errors.ContentResolutionError

MANIFEST_NAME = tlp.config.MANIFEST_NAME
IMAGE_STORE_DIR = tlp.config.IMAGE_STORE_DIR
IMAGE_REF_PREFIX = tlp.config.IMAGE_REF_PREFIX
CONTAINER_SUFFIX = tlp.config.CONTAINER_SUFFIX
LEGACY_SUFFIX = tlp.config.LEGACY_SUFFIX


@dataclasses.dataclass
class ArchiveLoad:
	document: Document
	missing_refs: list[str] = dataclasses.field(default_factory=list)
	preferences: ViewPreferences = dataclasses.field(default_factory=ViewPreferences)


#============================================
def iter_contents(document: Document):
	"""
	Yield every content occurrence: cells first, then overflow, page by page.
	"""
	for page in document.pages:
		layout = page.layout
		for cell in layout.cells:
			if cell.content is not None:
				yield cell.content
		yield from layout.overflow


#============================================
def assign_image_refs(document: Document) -> tuple[dict[bytes, str], dict[str, bytes]]:
	"""
	Give each distinct image payload a reference name.

	Args:
		document: Document to scan.

	Returns:
		Tuple of (ref by payload, payload by ref).
	"""
	refs_by_payload: dict[bytes, str] = {}
	store: dict[str, bytes] = {}
	for content in iter_contents(document):
		if not content.has_image or content.image in refs_by_payload:
			continue
		media_type = tlp.media.resolve_media_type(content)
		extension = tlp.media.extension_for_media_type(media_type)
		ref = f"{IMAGE_REF_PREFIX}{len(store)}{extension}"
		refs_by_payload[content.image] = ref
		store[ref] = content.image
	return (refs_by_payload, store)


#============================================
def build_manifest(document: Document, content_entry) -> dict:
	"""
	Build the manifest dictionary for a document.

	Args:
		document: Document to describe.
		content_entry: Callable turning a CellContent into its manifest dict.

	Returns:
		Manifest dictionary.
	"""
	pages = []
	for page in document.pages:
		layout = page.layout
		cells = []
		for cell in layout.cells:
			entry = None
			if cell.content is not None:
				entry = content_entry(cell.content)
			cells.append({"id": cell.id, "content": entry})
		pages.append(
			{
				"id": page.id,
				"cells": cells,
				"gridSettings": {
					"rows": layout.grid.rows,
					"cols": layout.grid.cols,
					"gap": layout.grid.gap,
					"margin": layout.grid.margin,
				},
				"hiddenContent": [content_entry(content) for content in layout.overflow],
			}
		)
	return {
		"pageSize": PageSize(document.page_size).value,
		"pages": pages,
		"showFilenames": document.show_filenames,
		"showGridLines": document.show_grid_lines,
		"showPageNumbers": document.show_page_numbers,
		"title": document.title,
	}


#============================================
def encode_archive(document: Document) -> bytes:
	"""
	Serialize a document and its images into container bytes.

	Args:
		document: Document to encode.

	Returns:
		Zip archive bytes.
	"""
	refs_by_payload, store = assign_image_refs(document)

	def content_entry(content: CellContent) -> dict:
		return {
			"filename": content.filename,
			"originalPath": content.original_path,
			"imageRef": refs_by_payload.get(content.image) if content.has_image else None,
		}

	manifest = build_manifest(document, content_entry)
	buffer = io.BytesIO()
	with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
		archive.writestr(MANIFEST_NAME, json.dumps(manifest, indent=2))
		for ref, payload in store.items():
			archive.writestr(f"{IMAGE_STORE_DIR}/{ref}", payload)
	return buffer.getvalue()


#============================================
def write_archive(document: Document, path: str | pathlib.Path) -> None:
	pathlib.Path(path).write_bytes(encode_archive(document))


#============================================
def require(data: dict, key: str, kind, where: str):
	"""
	Fetch a required manifest field of a given type.

	Args:
		data: Manifest dictionary.
		key: Field name.
		kind: Expected type or tuple of types.
		where: Location used in the error message.

	Returns:
		Field value.
	"""
	if key not in data:
		raise FormatError(f"Malformed manifest: {where} is missing '{key}'")
	value = data[key]
	if not isinstance(value, kind):
		raise FormatError(f"Malformed manifest: {where}.{key} has the wrong type")
	return value


#============================================
def optional_field(data: dict, key: str, kind, default):
	value = data.get(key)
	if value is None:
		return default
	if not isinstance(value, kind):
		raise FormatError(f"Malformed manifest: '{key}' has the wrong type")
	return value


#============================================
def parse_grid(data, fallback: GridSettings, where: str, strict: bool = False) -> GridSettings:
	"""
	Parse a gridSettings dictionary.

	Args:
		data: Dictionary with rows, cols, gap and margin, or None.
		fallback: Values used for absent fields when not strict.
		where: Location used in error messages.
		strict: Require all four fields.

	Returns:
		GridSettings.
	"""
	if data is None:
		return fallback
	if not isinstance(data, dict):
		raise FormatError(f"Malformed manifest: {where}.gridSettings is not an object")
	values = {}
	for key in ("rows", "cols", "gap", "margin"):
		if strict and key not in data:
			raise FormatError(f"Malformed manifest: {where}.gridSettings is missing '{key}'")
		value = data.get(key, getattr(fallback, key))
		if isinstance(value, bool) or not isinstance(value, (int, float)):
			raise FormatError(f"Malformed manifest: {where}.gridSettings.{key} is not a number")
		if key in ("rows", "cols"):
			if isinstance(value, float) and not value.is_integer():
				raise FormatError(f"Malformed manifest: {where}.gridSettings.{key} is not whole")
			value = int(value)
		else:
			value = float(value)
		values[key] = value
	try:
		return GridSettings(**values)
	except ValueError as error:
		raise FormatError(f"Malformed manifest: {where}.gridSettings: {error}") from error


#============================================
def build_page_layout(
	grid: GridSettings,
	cell_entries: list[tuple[str | None, CellContent | None]],
	overflow: list[CellContent],
) -> PageLayout:
	"""
	Build a page layout from stored cells, keeping every content.

	Stored cells beyond the grid capacity push their contents to the front
	of the overflow list; missing cells are created empty.

	Args:
		grid: Page grid.
		cell_entries: Stored (cell id, content) pairs in index order.
		overflow: Stored overflow contents.

	Returns:
		PageLayout.
	"""
	capacity = grid.capacity
	cells = []
	for cell_id, content in cell_entries[:capacity]:
		cells.append(Cell(id=cell_id or tlp.model.new_id("cell"), content=content))
	seen = {cell.id for cell in cells}
	if len(seen) != len(cells):
		cells = [dataclasses.replace(cell, id=tlp.model.new_id("cell")) for cell in cells]
	while len(cells) < capacity:
		cells.append(Cell(id=tlp.model.new_id("cell")))
	spilled = [content for _cell_id, content in cell_entries[capacity:] if content is not None]
	return PageLayout(grid=grid, cells=tuple(cells), overflow=tuple(spilled + overflow))


#============================================
def manifest_to_document(manifest, resolve_content, legacy: bool) -> Document:
	"""
	Convert a parsed manifest into a Document.

	Args:
		manifest: Parsed JSON value.
		resolve_content: Callable turning a content dict into CellContent or None.
		legacy: Whether to accept the older, looser manifest shapes.

	Returns:
		Document.
	"""
	if not isinstance(manifest, dict):
		raise FormatError("Malformed manifest: top level is not an object")
	if legacy:
		page_size_name = optional_field(manifest, "pageSize", str, PageSize.A4.value)
	else:
		page_size_name = require(manifest, "pageSize", str, "layout")
	try:
		page_size = PageSize(page_size_name)
	except ValueError as error:
		raise FormatError(f"Malformed manifest: unknown page size '{page_size_name}'") from error

	default_grid = GridSettings()
	if legacy:
		default_grid = parse_grid(
			{key: manifest[key] for key in ("rows", "cols", "gap", "margin") if key in manifest},
			default_grid,
			"layout",
		)

	pages: list[Page] = []
	for page_index, page_data in enumerate(require(manifest, "pages", list, "layout")):
		where = f"pages[{page_index}]"
		if not isinstance(page_data, dict):
			raise FormatError(f"Malformed manifest: {where} is not an object")
		if legacy:
			page_id = optional_field(page_data, "id", str, "") or tlp.model.new_id("page")
			grid = parse_grid(page_data.get("gridSettings"), default_grid, where)
		else:
			page_id = require(page_data, "id", str, where)
			grid = parse_grid(require(page_data, "gridSettings", dict, where), default_grid, where, strict=True)

		cell_entries: list[tuple[str | None, CellContent | None]] = []
		for cell_index, cell_data in enumerate(require(page_data, "cells", list, where)):
			cell_where = f"{where}.cells[{cell_index}]"
			if not isinstance(cell_data, dict):
				raise FormatError(f"Malformed manifest: {cell_where} is not an object")
			if legacy:
				cell_id = optional_field(cell_data, "id", str, None)
			else:
				cell_id = require(cell_data, "id", str, cell_where)
			content = None
			content_data = cell_data.get("content")
			if content_data is not None:
				content = resolve_content(content_data, cell_where)
			cell_entries.append((cell_id, content))

		overflow: list[CellContent] = []
		hidden = page_data.get("hiddenContent")
		if hidden is not None and not isinstance(hidden, list):
			raise FormatError(f"Malformed manifest: {where}.hiddenContent is not a list")
		for hidden_index, content_data in enumerate(hidden or []):
			if content_data is None:
				continue
			content = resolve_content(content_data, f"{where}.hiddenContent[{hidden_index}]")
			if content is not None:
				overflow.append(content)

		layout = build_page_layout(grid, cell_entries, overflow)
		pages.append(Page(id=page_id, layout=layout))

	if not pages:
		pages.append(tlp.model.make_page())

	return Document(
		page_size=page_size,
		pages=pages,
		show_filenames=optional_field(manifest, "showFilenames", bool, True),
		show_grid_lines=optional_field(manifest, "showGridLines", bool, True),
		show_page_numbers=optional_field(manifest, "showPageNumbers", bool, False),
		title=optional_field(manifest, "title", str, ""),
	)


#============================================
def read_content_metadata(content_data, where: str) -> tuple[str, str]:
	"""
	Read filename and original path from a content dictionary.
	"""
	if not isinstance(content_data, dict):
		raise FormatError(f"Malformed manifest: {where}.content is not an object")
	filename = optional_field(content_data, "filename", str, "")
	original_path = optional_field(content_data, "originalPath", str, filename)
	return (filename, original_path)


#============================================
def resolve_image_ref(store: dict[str, bytes], image_ref: str) -> bytes:
	"""
	Look up an image payload by reference.

	Args:
		store: Payloads keyed by reference name.
		image_ref: Reference from the manifest.

	Returns:
		Image bytes.
	"""
	if image_ref in store:
		return store[image_ref]
	name = image_ref.rsplit("/", 1)[-1]
	if name in store:
		return store[name]
	raise ContentResolutionError(image_ref)


#============================================
def read_manifest_json(raw: bytes):
	try:
		return json.loads(raw.decode("utf-8-sig"))
	except (UnicodeDecodeError, json.JSONDecodeError) as error:
		raise FormatError(f"Malformed manifest: {error}") from error


#============================================
def decode_archive_report(data: bytes) -> ArchiveLoad:
	"""
	Decode container bytes, reporting images that could not be resolved.

	Args:
		data: Zip archive bytes.

	Returns:
		ArchiveLoad with the document, missing refs, and view preferences.
	"""
	try:
		archive = zipfile.ZipFile(io.BytesIO(data), "r")
	except zipfile.BadZipFile as error:
		raise FormatError(f"Not a valid container: {error}") from error
	with archive:
		names = archive.namelist()
		if MANIFEST_NAME not in names:
			raise FormatError(f"Not a valid container: {MANIFEST_NAME} is missing")
		try:
			raw_manifest = archive.read(MANIFEST_NAME)
			store: dict[str, bytes] = {}
			prefix = f"{IMAGE_STORE_DIR}/"
			for name in names:
				if name.startswith(prefix) and not name.endswith("/"):
					store[name[len(prefix):]] = archive.read(name)
		except (zipfile.BadZipFile, OSError) as error:
			raise FormatError(f"Not a valid container: {error}") from error

	manifest = read_manifest_json(raw_manifest)
	missing: list[str] = []

	def resolve_content(content_data, where: str) -> CellContent | None:
		filename, original_path = read_content_metadata(content_data, where)
		image_ref = optional_field(content_data, "imageRef", str, None)
		if image_ref is None:
			return None
		try:
			payload = resolve_image_ref(store, image_ref)
		except ContentResolutionError as error:
			missing.append(error.image_ref)
			return None
		media_type = tlp.media.media_type_from_name(image_ref) or tlp.media.sniff_media_type(payload)
		return CellContent(
			filename=filename,
			original_path=original_path,
			image=payload,
			media_type=media_type,
		)

	document = manifest_to_document(manifest, resolve_content, legacy=False)
	preferences = ViewPreferences.from_manifest(manifest)
	return ArchiveLoad(document=document, missing_refs=missing, preferences=preferences)


#============================================
def decode_archive(data: bytes) -> Document:
	"""
	Decode container bytes into a Document.

	Args:
		data: Zip archive bytes.

	Returns:
		Document with every resolvable image attached.
	"""
	return decode_archive_report(data).document


#============================================
def read_layout_bytes(path: str | pathlib.Path) -> bytes:
	try:
		return pathlib.Path(path).read_bytes()
	except OSError as error:
		raise FormatError(f"Not a valid container: {error}") from error


#============================================
def read_archive(path: str | pathlib.Path) -> ArchiveLoad:
	return decode_archive_report(read_layout_bytes(path))


#============================================
def encode_legacy_manifest(document: Document) -> str:
	"""
	Serialize a document as a plain JSON manifest with inline images.

	Args:
		document: Document to encode.

	Returns:
		JSON text.
	"""

	def content_entry(content: CellContent) -> dict:
		media_type = tlp.media.resolve_media_type(content)
		return {
			"imageData": tlp.media.build_data_url(media_type, content.image),
			"filename": content.filename,
			"originalPath": content.original_path,
		}

	return json.dumps(build_manifest(document, content_entry), indent=2)


#============================================
def decode_legacy_manifest(raw: bytes) -> ArchiveLoad:
	"""
	Decode a plain JSON manifest whose images are inline data URLs.

	Args:
		raw: JSON bytes.

	Returns:
		ArchiveLoad.
	"""
	manifest = read_manifest_json(raw)

	def resolve_content(content_data, where: str) -> CellContent | None:
		filename, original_path = read_content_metadata(content_data, where)
		image_data = optional_field(content_data, "imageData", str, "")
		if not image_data:
			return None
		try:
			media_type, payload = tlp.media.parse_data_url(image_data)
		except ValueError as error:
			raise FormatError(f"Malformed manifest: {where}.imageData: {error}") from error
		return CellContent(
			filename=filename,
			original_path=original_path,
			image=payload,
			media_type=media_type or tlp.media.sniff_media_type(payload),
		)

	document = manifest_to_document(manifest, resolve_content, legacy=True)
	return ArchiveLoad(document=document, preferences=ViewPreferences.from_manifest(manifest))


#============================================
def save_legacy_manifest(document: Document, path: str | pathlib.Path) -> None:
	pathlib.Path(path).write_text(encode_legacy_manifest(document), encoding="utf-8")


#============================================
def load_legacy_manifest(path: str | pathlib.Path) -> ArchiveLoad:
	return decode_legacy_manifest(read_layout_bytes(path))


#============================================
def load_layout(path: str | pathlib.Path) -> ArchiveLoad:
	"""
	Load a layout file, picking the format from its extension.

	Args:
		path: .tlp container or .json legacy manifest.

	Returns:
		ArchiveLoad.
	"""
	path = pathlib.Path(path)
	suffix = path.suffix.lower()
	if suffix == LEGACY_SUFFIX:
		return load_legacy_manifest(path)
	if suffix == CONTAINER_SUFFIX:
		return read_archive(path)
	raise FormatError(f"Unknown layout file type: {path.name}")


#============================================
def save_layout(document: Document, path: str | pathlib.Path) -> None:
	"""
	Save a layout file, picking the format from its extension.

	Args:
		document: Document to save.
		path: .tlp container or .json legacy manifest.
	"""
	path = pathlib.Path(path)
	suffix = path.suffix.lower()
	if suffix == LEGACY_SUFFIX:
		save_legacy_manifest(document, path)
	elif suffix == CONTAINER_SUFFIX:
		write_archive(document, path)
	else:
		raise FormatError(f"Unknown layout file type: {path.name}")


#============================================
def unique_file_name(name: str, media_type: str, taken: set[str]) -> str:
	"""
	Pick a file name that no other payload in the package uses.

	Args:
		name: Preferred file name.
		media_type: Payload media type, used when the name has no extension.
		taken: Names already used (updated in place).

	Returns:
		Unique file name.
	"""
	candidate = pathlib.PurePath(name or "image").name
	stem = pathlib.PurePath(candidate).stem or "image"
	suffix = pathlib.PurePath(candidate).suffix or tlp.media.extension_for_media_type(media_type)
	candidate = f"{stem}{suffix}"
	counter = 1
	while candidate.lower() in taken:
		candidate = f"{stem}-{counter}{suffix}"
		counter += 1
	taken.add(candidate.lower())
	return candidate


#============================================
def package_layout(document: Document, output_path: str | pathlib.Path, as_zip: bool = True) -> int:
	"""
	Collect every distinct image plus a layout.json listing into a package.

	Args:
		document: Document to collect.
		output_path: Zip file path, or folder path when as_zip is False.
		as_zip: Write a zip archive instead of a folder.

	Returns:
		Number of image files written.
	"""
	names_by_payload: dict[bytes, str] = {}
	files: dict[str, bytes] = {}
	taken: set[str] = {MANIFEST_NAME.lower()}
	for content in iter_contents(document):
		if not content.has_image or content.image in names_by_payload:
			continue
		media_type = tlp.media.resolve_media_type(content)
		name = unique_file_name(content.filename, media_type, taken)
		names_by_payload[content.image] = name
		files[name] = content.image

	def entry(content: CellContent | None) -> dict:
		if content is None or not content.has_image:
			return {"filename": None}
		return {"filename": names_by_payload[content.image]}

	listing = {
		"pages": [
			{
				"cells": [entry(cell.content) for cell in page.cells],
				"hiddenContent": [entry(content) for content in page.overflow],
			}
			for page in document.pages
		]
	}
	output_path = pathlib.Path(output_path)
	if as_zip:
		with zipfile.ZipFile(output_path, "w", compression=zipfile.ZIP_DEFLATED) as archive:
			for name, payload in files.items():
				archive.writestr(name, payload)
			archive.writestr(MANIFEST_NAME, json.dumps(listing, indent=2))
	else:
		output_path.mkdir(parents=True, exist_ok=True)
		for name, payload in files.items():
			(output_path / name).write_bytes(payload)
		(output_path / MANIFEST_NAME).write_text(json.dumps(listing, indent=2), encoding="utf-8")
	return len(files)
