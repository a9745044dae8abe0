from __future__ import annotations

from fastapi import APIRouter, Depends

from app.schemas.uploads import MirrorFailureListResponse
from app.services.mirror import MirrorFailureLog
from app.services.upload_service import get_mirror_failures

router = APIRouter()


@router.get("/failures", response_model=MirrorFailureListResponse)
async def list_mirror_failures(
    failures: MirrorFailureLog = Depends(get_mirror_failures),
) -> MirrorFailureListResponse:
    """Recent remote mirror failures, newest first."""

    return MirrorFailureListResponse(
        failures=[entry.to_response() for entry in failures.recent()]
    )
