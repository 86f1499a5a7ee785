"""Unit tests for upload validation and local storage."""

import hashlib
import io
import json
from pathlib import Path

import pytest

from app.core.config import Settings
from app.infrastructure.exceptions import (
    StorageAlreadyExistsError,
    StoragePathError,
    StorageUnavailableException,
    UploadRejectedException,
)
from app.infrastructure.external.storage import LocalStorageService
from app.infrastructure.services.file_upload_service import FileUploadService, sanitize_filename

PDF_BYTES = b"%PDF-1.7\n" + b"x" * 100


def _settings(**overrides) -> Settings:
    values = {"max_upload_size": 1024, "storage_root": "/tmp/unused"}
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def storage(tmp_path: Path) -> LocalStorageService:
    return LocalStorageService(str(tmp_path), base_url="https://files.example.com/")


@pytest.fixture
def upload_service(storage: LocalStorageService) -> FileUploadService:
    return FileUploadService(storage, _settings())


class TestSanitizeFilename:
    def test_basename_only(self) -> None:
        assert sanitize_filename("/foo/bar/report.pdf") == "report.pdf"

    def test_windows_path_stripped(self) -> None:
        assert sanitize_filename("C:\\docs\\peticao.pdf") == "peticao.pdf"

    def test_control_characters_removed(self) -> None:
        assert sanitize_filename("a\x00b.pdf") == "ab.pdf"

    @pytest.mark.parametrize("name", ["", None, "..", "/", "  "])
    def test_empty_rejected(self, name) -> None:
        with pytest.raises(UploadRejectedException) as exc_info:
            sanitize_filename(name)
        assert exc_info.value.details["reason"] == "invalid_filename"


class TestFileUploadService:
    async def test_stores_and_describes_file(self, upload_service: FileUploadService, tmp_path: Path) -> None:
        ref = await upload_service.upload(io.BytesIO(PDF_BYTES), "Petição.pdf", "application/pdf; charset=binary")
        assert ref.file_name == "Petição.pdf"
        assert ref.file_size == len(PDF_BYTES)
        assert ref.mime_type == "application/pdf"
        assert ref.path.startswith("uploads/")
        assert ref.url == f"https://files.example.com/files/{ref.path}"
        assert (tmp_path / ref.path).read_bytes() == PDF_BYTES

    async def test_disallowed_extension(self, upload_service: FileUploadService) -> None:
        with pytest.raises(UploadRejectedException) as exc_info:
            await upload_service.upload(io.BytesIO(b"MZ"), "virus.exe", "application/pdf")
        assert exc_info.value.details["reason"] == "extension_not_allowed"

    async def test_disallowed_mime_type(self, upload_service: FileUploadService) -> None:
        with pytest.raises(UploadRejectedException) as exc_info:
            await upload_service.upload(io.BytesIO(PDF_BYTES), "peticao.pdf", "text/html")
        assert exc_info.value.details["reason"] == "mime_type_not_allowed"

    async def test_missing_content_type_is_rejected(self, upload_service: FileUploadService) -> None:
        with pytest.raises(UploadRejectedException):
            await upload_service.upload(io.BytesIO(PDF_BYTES), "peticao.pdf", None)

    async def test_empty_file(self, upload_service: FileUploadService) -> None:
        with pytest.raises(UploadRejectedException) as exc_info:
            await upload_service.upload(io.BytesIO(b""), "peticao.pdf", "application/pdf")
        assert exc_info.value.details["reason"] == "empty_file"

    async def test_too_large(self, upload_service: FileUploadService, tmp_path: Path) -> None:
        with pytest.raises(UploadRejectedException) as exc_info:
            await upload_service.upload(io.BytesIO(b"x" * 2048), "peticao.pdf", "application/pdf")
        assert exc_info.value.details["reason"] == "too_large"
        assert exc_info.value.http_status == 413
        assert not (tmp_path / "uploads").exists()


class TestLocalStorageService:
    async def test_upload_writes_metadata_sidecar(self, storage: LocalStorageService, tmp_path: Path) -> None:
        checksum = hashlib.sha256(PDF_BYTES).hexdigest()
        result = await storage.upload(io.BytesIO(PDF_BYTES), "uploads/a/doc.pdf", checksum, "application/pdf")
        assert result["size"] == len(PDF_BYTES)
        meta = json.loads((tmp_path / "uploads/a/doc.pdf.meta.json").read_text())
        assert meta["checksum"] == checksum
        assert meta["content_type"] == "application/pdf"
        assert await storage.exists("uploads/a/doc.pdf")

    async def test_identical_reupload_is_idempotent(self, storage: LocalStorageService) -> None:
        checksum = hashlib.sha256(PDF_BYTES).hexdigest()
        first = await storage.upload(io.BytesIO(PDF_BYTES), "uploads/a/doc.pdf", checksum, "application/pdf")
        second = await storage.upload(io.BytesIO(PDF_BYTES), "uploads/a/doc.pdf", checksum, "application/pdf")
        assert first["uploaded_at"] == second["uploaded_at"]

    async def test_different_content_conflicts(self, storage: LocalStorageService) -> None:
        checksum = hashlib.sha256(PDF_BYTES).hexdigest()
        await storage.upload(io.BytesIO(PDF_BYTES), "uploads/a/doc.pdf", checksum, "application/pdf")
        other = b"other"
        with pytest.raises(StorageAlreadyExistsError):
            await storage.upload(
                io.BytesIO(other), "uploads/a/doc.pdf", hashlib.sha256(other).hexdigest(), "application/pdf"
            )

    async def test_checksum_mismatch(self, storage: LocalStorageService, tmp_path: Path) -> None:
        with pytest.raises(StorageUnavailableException):
            await storage.upload(io.BytesIO(PDF_BYTES), "uploads/b/doc.pdf", "0" * 64, "application/pdf")
        assert not (tmp_path / "uploads/b/doc.pdf").exists()

    async def test_path_traversal_rejected(self, storage: LocalStorageService) -> None:
        with pytest.raises(StoragePathError):
            await storage.upload(io.BytesIO(PDF_BYTES), "../escape.pdf", "0" * 64, "application/pdf")
        assert not await storage.exists("../escape.pdf")

    def test_public_url_without_base(self, tmp_path: Path) -> None:
        assert LocalStorageService(str(tmp_path)).public_url("uploads/a.pdf") == "/files/uploads/a.pdf"
