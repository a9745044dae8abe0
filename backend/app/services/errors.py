from __future__ import annotations


class StorageError(Exception):
    """Base class for failures the HTTP layer can translate directly."""

    status_code = 500
    default_message = "Storage operation failed"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidPath(StorageError):
    """Raised for traversal attempts or malformed storage paths."""

    status_code = 400
    default_message = "Invalid file path"


class PathEscapesRoot(InvalidPath):
    """Raised when a path resolves outside its storage root."""

    status_code = 403


class FileTooLarge(StorageError):
    status_code = 413
    default_message = "File too large"


class UnsupportedType(StorageError):
    status_code = 415
    default_message = "File type is not allowed"


class InvalidSignature(StorageError):
    status_code = 400
    default_message = "File content does not match its declared type"


class NotFound(StorageError):
    status_code = 404
    default_message = "File not found"


class RangeNotSatisfiable(StorageError):
    status_code = 416
    default_message = "Requested range not satisfiable"

    def __init__(self, size: int, message: str | None = None) -> None:
        self.size = size
        super().__init__(message)


class FilesystemError(StorageError):
    """Wraps OS errors; the message sent to clients never names paths."""

    status_code = 500
    default_message = "Failed to access storage"


class UpstreamMirrorError(StorageError):
    """Raised by the remote mirror; callers log it and keep the local copy."""

    status_code = 502
    default_message = "Remote mirror upload failed"


class MissingFile(StorageError):
    status_code = 400
    default_message = "No file provided"
