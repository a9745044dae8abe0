from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from pathlib import Path

from app.schemas.uploads import MirrorFailureEntry, UploadResultResponse


@dataclass(frozen=True, slots=True)
class UploadResult:
    """What a successful write hands back to the caller for persistence."""

    filename: str
    original_name: str
    url: str
    file_size: int
    mime_type: str
    relative_path: str
    blur_data_url: str | None = None
    tags: tuple[str, ...] = ()

    def with_url(self, url: str) -> UploadResult:
        return replace(self, url=url)

    def to_response(self) -> UploadResultResponse:
        return UploadResultResponse(
            filename=self.filename,
            original_name=self.original_name,
            url=self.url,
            file_size=self.file_size,
            mime_type=self.mime_type,
            blur_data_url=self.blur_data_url,
            tags=list(self.tags),
        )


@dataclass(frozen=True, slots=True)
class StoredFile:
    """A file resolved under a storage root and ready to be served."""

    path: Path
    size: int
    content_type: str

    @property
    def name(self) -> str:
        return self.path.name


@dataclass(frozen=True, slots=True)
class MirrorFailure:
    key: str
    error: str
    occurred_at: datetime

    def to_response(self) -> MirrorFailureEntry:
        return MirrorFailureEntry(
            key=self.key, error=self.error, occurred_at=self.occurred_at
        )
