from __future__ import annotations

import os
import re
from pathlib import Path

from app.services.errors import InvalidPath, PathEscapesRoot


MAX_NAME_LENGTH = 255
_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9._-]")


def sanitize_filename(value: str) -> str:
    """
    Replace every character outside ``[a-zA-Z0-9._-]`` with ``_`` and drop
    ``..`` sequences. The result never contains a separator.
    """
    cleaned = _UNSAFE_CHARS.sub("_", value)
    while ".." in cleaned:
        cleaned = cleaned.replace("..", "")
    return cleaned[:MAX_NAME_LENGTH]


def sanitize_folder(folder: str | None) -> str:
    """Collapse a caller-supplied folder into one safe path segment."""
    if not folder:
        return ""
    cleaned = sanitize_filename(folder.strip()).strip(".")
    return cleaned


def check_relative_path(raw: str) -> str:
    """
    Reject a storage-relative path before the filesystem is touched.

    Empty paths, ``..`` anywhere, a leading ``/``, backslashes and NUL bytes
    all raise :class:`InvalidPath`.
    """
    if not raw or ".." in raw or raw.startswith("/") or "\\" in raw or "\x00" in raw:
        raise InvalidPath()
    segments = [segment for segment in raw.split("/") if segment not in ("", ".")]
    if not segments:
        raise InvalidPath()
    return "/".join(segments)


def resolve_within_root(root: Path, relative: str) -> Path:
    """
    Join ``relative`` onto ``root`` and make sure the real location stays
    beneath the real root. Symlinks are followed on both sides.
    """
    real_root = Path(os.path.realpath(root))
    candidate = Path(os.path.realpath(real_root / relative))
    if not candidate.is_relative_to(real_root):
        raise PathEscapesRoot()
    if candidate == real_root:
        raise InvalidPath()
    return candidate
