from __future__ import annotations

import asyncio
from dataclasses import dataclass, replace

from fastapi import UploadFile

from app.core.config import (
    Settings,
    get_settings,
    media_storage_config,
    report_storage_config,
)
from app.core.logging import get_logger
from app.domain.content import DEFAULT_CONTENT_TYPE, EXTENSIONS, content_type_for
from app.domain.image import blur_placeholder, compress_image
from app.services.errors import UpstreamMirrorError
from app.services.mirror import BlobMirror, MirrorFailureLog
from app.services.models import UploadResult
from app.services.storage import LocalFileStorage


_logger = get_logger(__name__)


@dataclass(slots=True)
class UploadOptions:
    folder: str | None = None
    quality: int | None = None
    generate_blur: bool = False
    tags: tuple[str, ...] = ()


class UploadService:
    """Coordinates validation, image processing, storage and mirroring."""

    def __init__(
        self,
        storage: LocalFileStorage,
        *,
        mirror: BlobMirror | None = None,
        failures: MirrorFailureLog | None = None,
        process_images: bool = False,
    ) -> None:
        self._storage = storage
        self._mirror = mirror
        self._failures = failures or MirrorFailureLog()
        self._process_images = process_images

    @property
    def storage(self) -> LocalFileStorage:
        return self._storage

    @property
    def failures(self) -> MirrorFailureLog:
        return self._failures

    async def upload(
        self,
        file: UploadFile | bytes,
        original_name: str | None = None,
        options: UploadOptions | None = None,
    ) -> UploadResult:
        options = options or UploadOptions()
        if isinstance(file, (bytes, bytearray, memoryview)):
            data = bytes(file)
            name = original_name or "upload"
            mime_type = self._default_type(name)
        else:
            data = await file.read()
            name = original_name or file.filename or "upload"
            mime_type = (file.content_type or "").split(";")[0].strip().lower()

        # Size, type and signature are checked on the bytes as received.
        self._storage.validate(data, mime_type)

        blur: str | None = None
        extension: str | None = None
        stored_data, stored_type = data, mime_type
        if self._process_images:
            if options.quality is not None:
                processed = await asyncio.to_thread(
                    compress_image, data, mime_type, options.quality
                )
                stored_data, stored_type = processed.data, processed.mime_type
                extension = processed.extension or None
            if options.generate_blur:
                blur = await asyncio.to_thread(blur_placeholder, stored_data)

        result = await asyncio.to_thread(
            self._storage.save_bytes,
            stored_data,
            name,
            stored_type,
            folder=options.folder,
            extension=extension,
        )
        if blur is not None:
            result = replace(result, blur_data_url=blur)
        if options.tags:
            result = replace(result, tags=options.tags)

        if self._mirror is not None:
            result = await self._mirror_or_keep_local(self._mirror, result, stored_data)
        return result

    async def _mirror_or_keep_local(
        self, mirror: BlobMirror, result: UploadResult, data: bytes
    ) -> UploadResult:
        try:
            return await mirror.promote(result, data)
        except UpstreamMirrorError as exc:
            entry = self._failures.record(BlobMirror.blob_key(result), exc.message)
            _logger.warning(
                "Blob mirror failed, keeping local copy",
                kind=self._storage.kind,
                key=entry.key,
                error=entry.error,
                failures_total=self._failures.total,
            )
            return result

    def _default_type(self, name: str) -> str:
        allowed = self._storage.config.allowed_types
        if len(allowed) == 1:
            return next(iter(allowed))
        guessed = content_type_for(name)
        return guessed if guessed in EXTENSIONS else DEFAULT_CONTENT_TYPE


_failures = MirrorFailureLog()
_media_service: UploadService | None = None
_report_service: UploadService | None = None


def get_mirror_failures() -> MirrorFailureLog:
    return _failures


def build_mirror(settings: Settings) -> BlobMirror | None:
    if not settings.blob_enabled:
        return None
    return BlobMirror(
        settings.blob_read_write_token or "",
        api_url=settings.blob_api_url,
        timeout=settings.blob_timeout,
    )


def get_media_upload_service() -> UploadService:
    global _media_service
    if _media_service is None:
        settings = get_settings()
        _media_service = UploadService(
            LocalFileStorage(media_storage_config(settings)),
            mirror=build_mirror(settings),
            failures=_failures,
            process_images=True,
        )
    return _media_service


def get_report_upload_service() -> UploadService:
    global _report_service
    if _report_service is None:
        settings = get_settings()
        _report_service = UploadService(
            LocalFileStorage(report_storage_config(settings)),
            failures=_failures,
        )
    return _report_service
