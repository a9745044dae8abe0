from __future__ import annotations

import secrets
import time
from pathlib import PurePosixPath

from app.domain.paths import MAX_NAME_LENGTH, sanitize_filename


_FALLBACK_BASE = "file"


def split_original_name(original_name: str) -> tuple[str, str]:
    """Return ``(base, extension)`` of the last path component, extension lowered."""
    leaf = original_name.replace("\\", "/").rsplit("/", 1)[-1]
    pure = PurePosixPath(leaf)
    suffix = pure.suffix.lower()
    base = leaf[: len(leaf) - len(suffix)] if suffix else leaf
    return base, suffix


def generate_unique_filename(
    original_name: str,
    *,
    extension: str | None = None,
    timestamp_ms: int | None = None,
    token: str | None = None,
) -> str:
    """
    Build ``<base>_<epoch ms>_<8 hex chars><ext>`` from an uploaded name.

    Uniqueness is probabilistic; the storage layer re-rolls the name when the
    target already exists.
    """
    base, suffix = split_original_name(original_name)
    ext = extension if extension is not None else suffix
    ext = "." + sanitize_filename(ext.lstrip(".")) if ext.lstrip(".") else ""

    stamp = timestamp_ms if timestamp_ms is not None else time.time_ns() // 1_000_000
    random_part = token or secrets.token_hex(4)
    tail = f"_{stamp}_{random_part}{ext}"

    sanitized = sanitize_filename(base) or _FALLBACK_BASE
    sanitized = sanitized[: max(1, MAX_NAME_LENGTH - len(tail))]
    return f"{sanitized}{tail}"
