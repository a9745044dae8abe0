import pytest

from app.domain.ranges import parse_byte_range
from app.services.errors import RangeNotSatisfiable


@pytest.mark.parametrize(
    ("header", "expected"),
    [
        (None, None),
        ("bytes=0-99", (0, 99)),
        ("bytes=100-", (100, 999)),
        ("bytes=999-", (999, 999)),
        ("bytes=-100", (900, 999)),
        ("bytes=900-5000", (900, 999)),
        ("bytes=-5000", (0, 999)),
        ("bytes=0-9,20-29", None),
        ("items=0-9", None),
        ("bytes=50-10", None),
        ("bytes=-", None),
    ],
)
def test_parse_byte_range(header, expected):
    assert parse_byte_range(header, 1000) == expected


def test_parse_byte_range_past_end():
    with pytest.raises(RangeNotSatisfiable) as excinfo:
        parse_byte_range("bytes=1000-", 1000)

    assert excinfo.value.size == 1000
    assert excinfo.value.status_code == 416


def test_parse_byte_range_empty_suffix():
    with pytest.raises(RangeNotSatisfiable):
        parse_byte_range("bytes=-0", 1000)
