from __future__ import annotations

from pathlib import PurePosixPath
from typing import Callable, Collection, Mapping

from app.services.errors import FileTooLarge, InvalidSignature, UnsupportedType


DEFAULT_CONTENT_TYPE = "application/octet-stream"

CONTENT_TYPES: Mapping[str, str] = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".webp": "image/webp",
    ".svg": "image/svg+xml",
    ".pdf": "application/pdf",
    ".mp4": "video/mp4",
    ".mp3": "audio/mpeg",
    ".json": "application/json",
    ".txt": "text/plain",
}

EXTENSIONS: Mapping[str, str] = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
    "image/webp": ".webp",
    "application/pdf": ".pdf",
}


def _is_webp(data: bytes) -> bool:
    return data[:4] == b"RIFF" and data[8:12] == b"WEBP"


SIGNATURES: Mapping[str, Callable[[bytes], bool]] = {
    "application/pdf": lambda data: data[:4] == b"%PDF",
    "image/jpeg": lambda data: data[:3] == b"\xff\xd8\xff",
    "image/png": lambda data: data[:8] == b"\x89PNG\r\n\x1a\n",
    "image/gif": lambda data: data[:6] in (b"GIF87a", b"GIF89a"),
    "image/webp": _is_webp,
}


def content_type_for(name: str) -> str:
    """Infer a response content type from the file extension."""
    return CONTENT_TYPES.get(PurePosixPath(name).suffix.lower(), DEFAULT_CONTENT_TYPE)


def format_megabytes(size: int) -> str:
    return f"{size / 1024 / 1024:.2f}MB"


def validate_upload(
    data: bytes,
    mime_type: str,
    *,
    allowed_types: Collection[str],
    max_size: int,
) -> None:
    """
    Check size, then the declared type, then the magic bytes.

    Nothing is written before this returns, so a failure has no side effects.
    """
    if len(data) > max_size:
        raise FileTooLarge(
            f"File size ({format_megabytes(len(data))}) exceeds maximum allowed "
            f"size ({format_megabytes(max_size)})"
        )

    if mime_type not in allowed_types:
        allowed = ", ".join(sorted(allowed_types))
        raise UnsupportedType(
            f'File type "{mime_type}" is not allowed. Allowed types: {allowed}'
        )

    matches = SIGNATURES.get(mime_type)
    if matches is not None and not matches(data):
        raise InvalidSignature(
            f"File does not appear to be a valid {mime_type} file."
        )
