from __future__ import annotations

from fastapi import APIRouter, Depends, File, Form, UploadFile, status

from app.core.config import get_settings
from app.schemas.uploads import UploadEnvelope, error_responses
from app.services.errors import MissingFile
from app.services.upload_service import (
    UploadOptions,
    UploadService,
    get_media_upload_service,
    get_report_upload_service,
)

router = APIRouter()


def _split_tags(raw: str | None) -> tuple[str, ...]:
    if not raw:
        return ()
    return tuple(tag.strip() for tag in raw.split(",") if tag.strip())


@router.post(
    "/upload",
    response_model=UploadEnvelope,
    status_code=status.HTTP_200_OK,
    responses=error_responses(400, 413, 415, 422),
)
async def upload_media(
    file: UploadFile | None = File(default=None),
    folder: str | None = Form(default=None),
    quality: int | None = Form(default=None),
    generate_blur: bool = Form(default=True),
    tags: str | None = Form(default=None),
    service: UploadService = Depends(get_media_upload_service),
) -> UploadEnvelope:
    if file is None:
        raise MissingFile()

    options = UploadOptions(
        folder=folder or None,
        quality=quality if quality is not None else get_settings().default_image_quality,
        generate_blur=generate_blur,
        tags=_split_tags(tags),
    )
    try:
        result = await service.upload(file, file.filename, options)
    finally:
        await file.close()

    return UploadEnvelope(data=result.to_response())


@router.post(
    "/reports/upload",
    response_model=UploadEnvelope,
    status_code=status.HTTP_200_OK,
    responses=error_responses(400, 413, 415, 422),
)
async def upload_report(
    file: UploadFile | None = File(default=None),
    folder: str | None = Form(default=None),
    service: UploadService = Depends(get_report_upload_service),
) -> UploadEnvelope:
    if file is None:
        raise MissingFile()

    options = UploadOptions(folder=folder or get_settings().default_report_folder)
    try:
        result = await service.upload(file, file.filename, options)
    finally:
        await file.close()

    return UploadEnvelope(data=result.to_response())
