from __future__ import annotations

import base64
from dataclasses import dataclass

import cv2
import numpy as np

from app.core.logging import get_logger
from app.services.errors import UnsupportedType

_logger = get_logger(__name__)

REENCODABLE_TYPES = frozenset({"image/jpeg", "image/png", "image/webp"})
_BLUR_WIDTH = 10


@dataclass(slots=True)
class ProcessedImage:
    data: bytes
    mime_type: str
    extension: str


def clamp_quality(quality: int) -> int:
    return max(1, min(100, int(quality)))


def decode_image(data: bytes) -> np.ndarray:
    """
    Decode raw bytes into an OpenCV image, keeping any alpha channel.
    """
    buffer = np.frombuffer(data, dtype=np.uint8)
    image = cv2.imdecode(buffer, cv2.IMREAD_UNCHANGED)
    if image is None:
        raise UnsupportedType("Image could not be decoded")
    return image


def compress_image(data: bytes, mime_type: str, quality: int) -> ProcessedImage:
    """
    Re-encode a raster image as WebP at the requested quality.

    Types OpenCV cannot round-trip faithfully (GIF animations) are returned
    unchanged.
    """
    if mime_type not in REENCODABLE_TYPES:
        return ProcessedImage(data, mime_type, "")

    image = decode_image(data)
    level = clamp_quality(quality)
    ok, encoded = cv2.imencode(".webp", image, [cv2.IMWRITE_WEBP_QUALITY, level])
    if not ok:
        raise UnsupportedType("Image could not be re-encoded")

    _logger.debug(
        "Image re-encoded",
        source_type=mime_type,
        quality=level,
        before=len(data),
        after=int(encoded.size),
    )
    return ProcessedImage(encoded.tobytes(), "image/webp", ".webp")


def blur_placeholder(data: bytes) -> str | None:
    """
    Build a tiny blurred PNG preview encoded as a data URL.
    """
    try:
        image = decode_image(data)
    except UnsupportedType:
        _logger.debug("Blur placeholder skipped")
        return None

    height, width = image.shape[:2]
    if not width or not height:
        return None
    target_height = max(1, round(height * _BLUR_WIDTH / width))
    small = cv2.resize(image, (_BLUR_WIDTH, target_height), interpolation=cv2.INTER_AREA)
    blurred = cv2.GaussianBlur(small, (3, 3), 0)
    ok, encoded = cv2.imencode(".png", blurred)
    if not ok:
        return None
    payload = base64.b64encode(encoded.tobytes()).decode("ascii")
    return f"data:image/png;base64,{payload}"
