from __future__ import annotations

from pathlib import Path

import pytest

from app.core.logging import _path_redactor


def _run(root: Path | None, **event) -> dict:
    return _path_redactor(root)(None, "error", dict(event))


def test_redacts_paths_under_storage_root():
    event = _run(
        Path("/srv/app"),
        event="write failed",
        error="[Errno 13] Permission denied: '/srv/app/media/a.webp'",
    )

    assert event["error"] == "[Errno 13] Permission denied: '<storage>/media/a.webp'"
    assert event["event"] == "write failed"


def test_leaves_sibling_directories_alone():
    event = _run(Path("/srv/app"), error="cannot open /srv/app2/media/a.webp")

    assert event["error"] == "cannot open /srv/app2/media/a.webp"


@pytest.mark.parametrize("root", [None, Path("/")])
def test_no_redaction_without_a_meaningful_root(root):
    message = "Permission denied: '/srv/app/x'"

    assert _run(root, error=message)["error"] == message


def test_non_string_values_pass_through():
    event = _run(Path("/srv/app"), errno=13, path=Path("/srv/app/x"))

    assert event["errno"] == 13
    assert event["path"] == Path("/srv/app/x")
