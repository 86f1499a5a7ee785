"""Persistence repositories. Re-exports for dependency injection."""

from app.infrastructure.persistence.repositories.approval_repo import ApprovalRepository
from app.infrastructure.persistence.repositories.base import BaseRepository
from app.infrastructure.persistence.repositories.checklist_repo import ChecklistRepository
from app.infrastructure.persistence.repositories.comment_repo import CommentRepository
from app.infrastructure.persistence.repositories.draft_version_repo import (
    DraftVersionRepository,
)
from app.infrastructure.persistence.repositories.filing_record_repo import (
    FilingRecordRepository,
)
from app.infrastructure.persistence.repositories.history_repo import (
    ActivityRepository,
    PhaseTransitionRepository,
)
from app.infrastructure.persistence.repositories.thesis_repo import ThesisRepository
from app.infrastructure.persistence.repositories.workspace_document_repo import (
    WorkspaceDocumentRepository,
)
from app.infrastructure.persistence.repositories.workspace_repo import WorkspaceRepository

__all__ = [
    "ActivityRepository",
    "ApprovalRepository",
    "BaseRepository",
    "ChecklistRepository",
    "CommentRepository",
    "DraftVersionRepository",
    "FilingRecordRepository",
    "PhaseTransitionRepository",
    "ThesisRepository",
    "WorkspaceDocumentRepository",
    "WorkspaceRepository",
]
