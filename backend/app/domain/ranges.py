from __future__ import annotations

import re

from app.services.errors import RangeNotSatisfiable


_RANGE_RE = re.compile(r"^bytes=(\d*)-(\d*)$")


def parse_byte_range(header: str | None, size: int) -> tuple[int, int] | None:
    """
    Interpret a single-range ``Range`` header against a file of ``size`` bytes.

    Returns inclusive ``(start, end)`` offsets, or ``None`` when the header is
    absent, malformed or asks for several ranges (the whole body is served).
    Raises :class:`RangeNotSatisfiable` when the range lies past the end.
    """
    if not header:
        return None
    match = _RANGE_RE.match(header.strip().replace(" ", ""))
    if match is None:
        return None

    first, last = match.groups()
    if not first and not last:
        return None

    if not first:
        length = int(last)
        if length == 0 or size == 0:
            raise RangeNotSatisfiable(size)
        return max(0, size - length), size - 1

    start = int(first)
    if last and int(last) < start:
        return None
    if start >= size:
        raise RangeNotSatisfiable(size)
    end = int(last) if last else size - 1
    return start, min(end, size - 1)
