"""HTTP tests for POST /uploads (first step of the two-step document protocol)."""

from pathlib import Path

import pytest
from httpx import AsyncClient

from app.api.v1.dependencies import get_upload_service
from app.core.config import Settings
from app.infrastructure.external.storage import LocalStorageService
from app.infrastructure.services import FileUploadService
from app.main import app


@pytest.fixture
def storage_root(tmp_path: Path, client: AsyncClient) -> Path:
    settings = Settings(storage_root=str(tmp_path), max_upload_size=1024)
    app.dependency_overrides[get_upload_service] = lambda: FileUploadService(
        LocalStorageService(str(tmp_path)), settings
    )
    return tmp_path


async def test_upload_returns_file_reference(client: AsyncClient, storage_root: Path) -> None:
    response = await client.post(
        "/api/v1/uploads",
        files={"file": ("peticao.pdf", b"%PDF-1.7 content", "application/pdf")},
    )
    assert response.status_code == 201
    data = response.json()
    assert data["file_name"] == "peticao.pdf"
    assert data["file_size"] == len(b"%PDF-1.7 content")
    assert data["mime_type"] == "application/pdf"
    assert data["url"] == f"/files/{data['path']}"
    assert (storage_root / data["path"]).exists()


async def test_disallowed_type_returns_400(client: AsyncClient, storage_root: Path) -> None:
    response = await client.post(
        "/api/v1/uploads",
        files={"file": ("script.sh", b"#!/bin/sh", "text/x-shellscript")},
    )
    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "UPLOAD_REJECTED"
    assert body["details"]["reason"] == "extension_not_allowed"


async def test_oversize_file_returns_413(client: AsyncClient, storage_root: Path) -> None:
    response = await client.post(
        "/api/v1/uploads",
        files={"file": ("peticao.pdf", b"x" * 4096, "application/pdf")},
    )
    assert response.status_code == 413
    assert response.json()["details"]["reason"] == "too_large"


async def test_missing_file_returns_422(client: AsyncClient, storage_root: Path) -> None:
    response = await client.post("/api/v1/uploads", data={"other": "value"})
    assert response.status_code == 422
