from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


MAX_FILE_SIZE = 10 * 1024 * 1024

MEDIA_TYPES = frozenset({"image/jpeg", "image/png", "image/gif", "image/webp"})
REPORT_TYPES = frozenset({"application/pdf"})

StorageKind = Literal["media", "reports"]


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    debug: bool = Field(False, alias="BLOODLINE_DEBUG")
    base_dir: Path = Field(default_factory=Path.cwd, alias="BLOODLINE_BASE_DIR")
    max_file_size: int = Field(MAX_FILE_SIZE, alias="BLOODLINE_MAX_FILE_SIZE")

    media_url_prefix: str = Field("/storage/media", alias="BLOODLINE_MEDIA_URL_PREFIX")
    reports_url_prefix: str = Field(
        "/storage/reports", alias="BLOODLINE_REPORTS_URL_PREFIX"
    )
    default_image_quality: int = Field(80, alias="BLOODLINE_IMAGE_QUALITY")
    default_report_folder: str = Field(
        "blood-reports", alias="BLOODLINE_REPORT_FOLDER"
    )

    # Remote mirroring
    blob_read_write_token: str | None = Field(None, alias="BLOB_READ_WRITE_TOKEN")
    blob_api_url: str = Field(
        "https://blob.vercel-storage.com", alias="BLOODLINE_BLOB_API_URL"
    )
    blob_timeout: float = Field(15.0, alias="BLOODLINE_BLOB_TIMEOUT")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    @field_validator("base_dir", mode="before")
    def _expand_base_dir(cls, value: Path | str) -> Path:
        """Expand user and make the base directory absolute."""
        return Path(value).expanduser().absolute()

    @field_validator("media_url_prefix", "reports_url_prefix", mode="before")
    def _normalize_prefix(cls, value: str) -> str:
        if isinstance(value, str):
            return "/" + value.strip().strip("/")
        return value

    @property
    def media_root(self) -> Path:
        return self.base_dir / "public" / "storage" / "media"

    @property
    def reports_root(self) -> Path:
        return self.base_dir / "storage" / "reports"

    @property
    def blob_enabled(self) -> bool:
        return bool(self.blob_read_write_token)


@dataclass(frozen=True, slots=True)
class StorageConfig:
    """Everything a storage instance needs to know about one upload kind."""

    kind: StorageKind
    root: Path
    url_prefix: str
    allowed_types: frozenset[str]
    max_file_size: int = MAX_FILE_SIZE
    cache_control: str = "public, max-age=31536000, immutable"
    content_disposition: bool = False


def media_storage_config(settings: Settings) -> StorageConfig:
    return StorageConfig(
        kind="media",
        root=settings.media_root,
        url_prefix=settings.media_url_prefix,
        allowed_types=MEDIA_TYPES,
        max_file_size=settings.max_file_size,
    )


def report_storage_config(settings: Settings) -> StorageConfig:
    return StorageConfig(
        kind="reports",
        root=settings.reports_root,
        url_prefix=settings.reports_url_prefix,
        allowed_types=REPORT_TYPES,
        max_file_size=settings.max_file_size,
        cache_control="private, max-age=3600",
        content_disposition=True,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached application settings."""

    return Settings()  # type: ignore[call-arg]
