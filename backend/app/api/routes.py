from __future__ import annotations

from fastapi import APIRouter

from app.api import mirror, storage, uploads

router = APIRouter(prefix="/api")
router.include_router(uploads.router, tags=["uploads"])
router.include_router(storage.router, prefix="/storage", tags=["storage"])
router.include_router(mirror.router, prefix="/mirror", tags=["mirror"])
