from __future__ import annotations

import asyncio

from fastapi import APIRouter, Depends, Request, Response, status

from app.core.logging import get_logger
from app.domain.ranges import parse_byte_range
from app.schemas.uploads import error_responses
from app.services.errors import FilesystemError, NotFound
from app.services.storage import LocalFileStorage
from app.services.upload_service import (
    get_media_upload_service,
    get_report_upload_service,
)

router = APIRouter()

_logger = get_logger(__name__)


def get_media_storage() -> LocalFileStorage:
    return get_media_upload_service().storage


def get_report_storage() -> LocalFileStorage:
    return get_report_upload_service().storage


async def serve_file(
    storage: LocalFileStorage, path: str, range_header: str | None
) -> Response:
    """Stream a stored file back, honouring a single byte range."""

    try:
        stored = await asyncio.to_thread(storage.open, path)
        byte_range = parse_byte_range(range_header, stored.size)
        headers = {
            "Cache-Control": storage.config.cache_control,
            "Accept-Ranges": "bytes",
        }
        if storage.config.content_disposition:
            headers["Content-Disposition"] = f'inline; filename="{stored.name}"'

        if byte_range is None:
            body = await asyncio.to_thread(storage.read, stored)
            return Response(body, media_type=stored.content_type, headers=headers)

        start, end = byte_range
        body = await asyncio.to_thread(storage.read, stored, start, end)
        headers["Content-Range"] = f"bytes {start}-{end}/{stored.size}"
        return Response(
            body,
            status_code=status.HTTP_206_PARTIAL_CONTENT,
            media_type=stored.content_type,
            headers=headers,
        )
    except OSError as exc:
        _logger.error(
            "Storage file serving error",
            kind=storage.kind,
            errno=exc.errno,
            error=str(exc),
        )
        raise FilesystemError("Failed to serve file") from exc


# Registered before the catch-all media route so the reports prefix wins.
@router.get("/reports/{path:path}", responses=error_responses(400, 403, 404, 413, 416, 500))
async def get_report_file(
    path: str,
    request: Request,
    storage: LocalFileStorage = Depends(get_report_storage),
) -> Response:
    return await serve_file(storage, path, request.headers.get("range"))


@router.delete(
    "/reports/{path:path}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses=error_responses(400, 403, 404, 500),
)
async def delete_report_file(
    path: str,
    storage: LocalFileStorage = Depends(get_report_storage),
) -> Response:
    removed = await asyncio.to_thread(storage.delete, path)
    if not removed:
        raise NotFound()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{path:path}", responses=error_responses(400, 403, 404, 413, 416, 500))
async def get_media_file(
    path: str,
    request: Request,
    storage: LocalFileStorage = Depends(get_media_storage),
) -> Response:
    return await serve_file(storage, path, request.headers.get("range"))
