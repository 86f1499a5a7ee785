"""Upload step of the two-step document protocol.

Validates the file against configured limits, stores it through the storage
adapter and returns a FileReference the caller later registers with
add_document or attach_document_file.
"""

from __future__ import annotations

import asyncio
import hashlib
import logging
import os
from typing import BinaryIO

from app.application.dtos.workspace import FileReference
from app.application.interfaces.services import IStorageService
from app.core.config import Settings
from app.infrastructure.exceptions import UploadRejectedException
from app.shared.utils.generators import generate_cuid

logger = logging.getLogger(__name__)


def _rewind_if_seekable(file_data: BinaryIO) -> None:
    if getattr(file_data, "seekable", lambda: False)():
        file_data.seek(0)


def sanitize_filename(filename: str | None) -> str:
    """Strip path components and control characters from an uploaded filename."""
    name = os.path.basename((filename or "").replace("\\", "/"))
    name = "".join(ch for ch in name if ch.isprintable()).strip(". ")
    if not name:
        raise UploadRejectedException(
            "Filename is empty or invalid", reason="invalid_filename"
        )
    return name


def _checksum_and_size_sync(file_data: BinaryIO, limit: int) -> tuple[str, int]:
    """Blocking: hash the stream, stopping once it passes limit bytes."""
    sha256 = hashlib.sha256()
    total = 0
    while chunk := file_data.read(65536):
        total += len(chunk)
        if total > limit:
            break
        sha256.update(chunk)
    _rewind_if_seekable(file_data)
    return sha256.hexdigest(), total


class FileUploadService:
    """Validate and store uploaded files; knows nothing about workspaces."""

    def __init__(self, storage: IStorageService, settings: Settings) -> None:
        self.storage = storage
        self.max_size = settings.max_upload_size
        self.mime_types = settings.upload_mime_types
        self.extensions = settings.upload_extensions

    def _validate_type(self, file_name: str, mime_type: str) -> None:
        ext = os.path.splitext(file_name)[1].lower()
        if ext not in self.extensions:
            raise UploadRejectedException(
                f"File extension '{ext or '(none)'}' is not allowed",
                reason="extension_not_allowed",
                extension=ext,
                allowed=sorted(self.extensions),
            )
        if mime_type not in self.mime_types:
            raise UploadRejectedException(
                f"File type '{mime_type}' is not allowed",
                reason="mime_type_not_allowed",
                mime_type=mime_type,
                allowed=sorted(self.mime_types),
            )

    async def upload(
        self,
        file_data: BinaryIO,
        filename: str | None,
        content_type: str | None,
    ) -> FileReference:
        """Validate, store, and describe the uploaded file.

        Raises:
            UploadRejectedException: empty, oversize, or disallowed file.
            StorageUnavailableException: storage could not accept the bytes.
        """
        file_name = sanitize_filename(filename)
        mime_type = (content_type or "application/octet-stream").split(";")[0].strip().lower()
        self._validate_type(file_name, mime_type)

        checksum, size = await asyncio.to_thread(
            _checksum_and_size_sync, file_data, self.max_size
        )
        if size == 0:
            raise UploadRejectedException("File is empty", reason="empty_file")
        if size > self.max_size:
            raise UploadRejectedException(
                f"File exceeds the maximum size of {self.max_size} bytes",
                reason="too_large",
                http_status=413,
                max_bytes=self.max_size,
            )

        storage_ref = f"uploads/{generate_cuid()}/{file_name}"
        await self.storage.upload(
            file_data,
            storage_ref,
            expected_checksum=checksum,
            content_type=mime_type,
            metadata={"original_filename": filename or file_name},
        )
        logger.info("Stored upload %s (%d bytes, %s)", storage_ref, size, mime_type)
        return FileReference(
            url=self.storage.public_url(storage_ref),
            path=storage_ref,
            file_name=file_name,
            file_size=size,
            mime_type=mime_type,
        )
