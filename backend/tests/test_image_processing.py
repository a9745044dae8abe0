import base64

import cv2
import numpy as np
import pytest

from app.domain.image import blur_placeholder, clamp_quality, compress_image
from app.services.errors import UnsupportedType


def _png_bytes(width: int = 40, height: int = 20) -> bytes:
    image = np.zeros((height, width, 3), dtype=np.uint8)
    image[:, : width // 2] = (0, 0, 255)
    ok, encoded = cv2.imencode(".png", image)
    assert ok
    return encoded.tobytes()


def test_compress_image_produces_webp():
    processed = compress_image(_png_bytes(), "image/png", 70)

    assert processed.mime_type == "image/webp"
    assert processed.extension == ".webp"
    assert processed.data[:4] == b"RIFF"
    assert processed.data[8:12] == b"WEBP"


def test_compress_image_leaves_gif_untouched():
    data = b"GIF89a\x01\x00\x01\x00"
    processed = compress_image(data, "image/gif", 80)

    assert processed.data == data
    assert processed.mime_type == "image/gif"
    assert processed.extension == ""


def test_compress_image_rejects_undecodable_bytes():
    with pytest.raises(UnsupportedType):
        compress_image(b"\x89PNG\r\n\x1a\ngarbage", "image/png", 80)


def test_clamp_quality():
    assert clamp_quality(0) == 1
    assert clamp_quality(250) == 100
    assert clamp_quality(55) == 55


def test_blur_placeholder_is_small_png_data_url():
    url = blur_placeholder(_png_bytes())

    assert url is not None
    assert url.startswith("data:image/png;base64,")
    decoded = base64.b64decode(url.split(",", 1)[1])
    image = cv2.imdecode(np.frombuffer(decoded, dtype=np.uint8), cv2.IMREAD_UNCHANGED)
    assert image.shape[1] == 10
    assert image.shape[0] == 5


def test_blur_placeholder_skips_undecodable_bytes():
    assert blur_placeholder(b"not an image") is None
