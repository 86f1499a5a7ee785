"""Infrastructure exceptions for storage, uploads and outbound calls.

Storage errors extend WorkspaceException so presentation can map them
to HTTP responses consistently.
"""

from typing import Any

from app.domain.exceptions import WorkspaceException


class StorageException(WorkspaceException):
    """Base exception for storage operations."""


class StorageUnavailableException(StorageException):
    """Storage backend could not accept or verify the file (HTTP 503)."""

    def __init__(self, storage_ref: str, reason: str) -> None:
        super().__init__(
            "File storage is unavailable; retry the upload",
            "STORAGE_UNAVAILABLE",
            {"storage_ref": storage_ref, "reason": reason},
        )


class StoragePathError(StorageException):
    """Storage reference resolves outside the storage root."""

    def __init__(self, storage_ref: str) -> None:
        super().__init__(
            f"Invalid storage path: {storage_ref}",
            "UPLOAD_REJECTED",
            {"storage_ref": storage_ref},
        )


class StorageAlreadyExistsError(StorageException):
    """A different file is already stored under the same reference."""

    def __init__(self, storage_ref: str) -> None:
        super().__init__(
            f"File already exists: {storage_ref}",
            "STORAGE_CONFLICT",
            {"storage_ref": storage_ref},
        )


class UploadRejectedException(StorageException):
    """Uploaded file failed size, type or name validation.

    http_status is 413 for oversize files and 400 otherwise.
    """

    def __init__(
        self,
        message: str,
        reason: str,
        http_status: int = 400,
        **details: Any,
    ) -> None:
        self.http_status = http_status
        super().__init__(message, "UPLOAD_REJECTED", {"reason": reason, **details})
