from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Any, MutableMapping

import structlog


_REDACTED = "<storage>"


def _path_redactor(root: Path | None) -> structlog.types.Processor:
    """Build a processor that hides the absolute storage location."""

    # A filesystem root would match every absolute path.
    if root is None or root == Path(root.anchor):
        pattern = None
    else:
        pattern = re.compile(re.escape(str(root)) + r"(?=[\\/])")

    def redact(
        _logger: Any, _method: str, event_dict: MutableMapping[str, Any]
    ) -> MutableMapping[str, Any]:
        if pattern is None:
            return event_dict
        for key, value in event_dict.items():
            if isinstance(value, str):
                event_dict[key] = pattern.sub(_REDACTED, value)
        return event_dict

    return redact


def configure_logging(debug: bool = False, redact_root: Path | None = None) -> None:
    """Configure structlog for the storage service.

    Debug mode renders human-readable console lines, otherwise each event is a
    single JSON object so operators can filter on keys such as ``kind``.
    When ``redact_root`` is given, string values under it are logged relative
    to ``<storage>`` instead of as absolute paths.
    """

    timestamper = structlog.processors.TimeStamper(fmt="iso")

    logging.basicConfig(
        format="%(message)s",
        level=logging.DEBUG if debug else logging.INFO,
    )

    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        timestamper,
        structlog.processors.add_log_level,
        _path_redactor(redact_root),
    ]
    if debug:
        processors.append(structlog.dev.ConsoleRenderer())
    else:
        processors.extend(
            [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
        )

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.DEBUG if debug else logging.INFO
        ),
        cache_logger_on_first_use=True,
    )


def get_logger(*args: Any, **kwargs: Any) -> structlog.BoundLogger:
    return structlog.get_logger(*args, **kwargs)
