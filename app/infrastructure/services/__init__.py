"""Infrastructure implementations of application service interfaces."""

from app.infrastructure.services.deadline_notifier import (
    HttpDeadlineNotifier,
    LogOnlyDeadlineNotifier,
)
from app.infrastructure.services.file_upload_service import FileUploadService

__all__ = [
    "FileUploadService",
    "HttpDeadlineNotifier",
    "LogOnlyDeadlineNotifier",
]
