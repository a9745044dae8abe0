from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class UploadResultResponse(_CamelModel):
    filename: str
    original_name: str
    url: str
    file_size: int = Field(ge=0)
    mime_type: str
    blur_data_url: str | None = None
    tags: list[str] = Field(default_factory=list)


class UploadEnvelope(BaseModel):
    success: bool = True
    data: UploadResultResponse


class ErrorResponse(BaseModel):
    error: str


def error_responses(*status_codes: int) -> dict[int | str, dict[str, object]]:
    """OpenAPI entries documenting the `{"error": ...}` body for each status."""
    return {code: {"model": ErrorResponse} for code in status_codes}


class MirrorFailureEntry(_CamelModel):
    key: str
    error: str
    occurred_at: datetime


class MirrorFailureListResponse(BaseModel):
    failures: list[MirrorFailureEntry] = Field(default_factory=list)
