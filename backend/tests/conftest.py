from __future__ import annotations

from dataclasses import replace

import pytest
from fastapi.testclient import TestClient

from app.api.storage import get_media_storage, get_report_storage
from app.core.config import Settings, media_storage_config, report_storage_config
from app.main import app
from app.services.mirror import MirrorFailureLog
from app.services.storage import LocalFileStorage
from app.services.upload_service import (
    UploadService,
    get_media_upload_service,
    get_mirror_failures,
    get_report_upload_service,
)


@pytest.fixture
def pdf_bytes() -> bytes:
    return b"%PDF-1.4\n" + b"0" * 2039


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(BLOODLINE_BASE_DIR=tmp_path)  # type: ignore[call-arg]


@pytest.fixture
def report_storage(settings) -> LocalFileStorage:
    return LocalFileStorage(report_storage_config(settings))


@pytest.fixture
def media_storage(settings) -> LocalFileStorage:
    return LocalFileStorage(media_storage_config(settings))


@pytest.fixture
def small_media_storage(settings) -> LocalFileStorage:
    return LocalFileStorage(replace(media_storage_config(settings), max_file_size=64))


@pytest.fixture
def failures() -> MirrorFailureLog:
    return MirrorFailureLog()


@pytest.fixture
def client(media_storage, report_storage, failures):
    media_service = UploadService(media_storage, failures=failures, process_images=True)
    report_service = UploadService(report_storage, failures=failures)

    app.dependency_overrides[get_media_upload_service] = lambda: media_service
    app.dependency_overrides[get_report_upload_service] = lambda: report_service
    app.dependency_overrides[get_media_storage] = lambda: media_storage
    app.dependency_overrides[get_report_storage] = lambda: report_storage
    app.dependency_overrides[get_mirror_failures] = lambda: failures
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
