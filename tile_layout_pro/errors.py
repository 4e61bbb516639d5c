"""
Error types for loading, laying out, and rendering tile layouts.
"""


class TileLayoutError(Exception):
	"""
	Base exception for all tile layout errors.
	"""

	def __init__(self, message: str, details: dict | None = None):
		super().__init__(message)
		self.message = message
		self.details = details or {}

	#============================================
	def to_dict(self) -> dict:
		"""
		Convert the error to a dictionary for reporting.

		Returns:
			Dictionary with error type, message and details.
		"""
		return {
			"error_type": self.__class__.__name__,
			"message": self.message,
			"details": self.details,
		}


class FormatError(TileLayoutError):
	"""Raised when a container or manifest cannot be read."""
	pass


class ContentResolutionError(TileLayoutError):
	"""Raised when an image reference is missing from the image store."""

	def __init__(self, image_ref: str):
		super().__init__(
			f"Image '{image_ref}' is missing from the image store",
			details={"image_ref": image_ref},
		)
		self.image_ref = image_ref


class GeometryError(TileLayoutError):
	"""Raised when grid settings do not fit on the page."""
	pass


class EmbedSkip(TileLayoutError):
	"""Raised when an adapter cannot draw an image payload."""

	def __init__(self, filename: str, media_type: str, reason: str = ""):
		message = f"Cannot embed '{filename}' ({media_type or 'unknown type'})"
		if reason:
			message += f": {reason}"
		super().__init__(message, details={"filename": filename, "media_type": media_type})
		self.filename = filename
		self.media_type = media_type
