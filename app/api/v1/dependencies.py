"""Presentation-layer dependency injection (composition root).

Provides FastAPI Depends() for DB sessions and application use cases.
Use cases are built from infrastructure implementations here; routes depend
only on these dependencies, not on infra directly.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.interfaces.services import IDeadlineNotifier
from app.application.use_cases.workspaces import WorkspaceService
from app.core.config import get_settings
from app.infrastructure.external.storage import LocalStorageService
from app.infrastructure.persistence.database import get_db, get_db_transactional
from app.infrastructure.persistence.repositories import (
    ActivityRepository,
    ApprovalRepository,
    ChecklistRepository,
    CommentRepository,
    DraftVersionRepository,
    FilingRecordRepository,
    PhaseTransitionRepository,
    ThesisRepository,
    WorkspaceDocumentRepository,
    WorkspaceRepository,
)
from app.infrastructure.services import FileUploadService, LogOnlyDeadlineNotifier


def get_deadline_notifier(request: Request) -> IDeadlineNotifier:
    """Notifier created at startup (lifespan); log-only when absent."""
    notifier = getattr(request.app.state, "deadline_notifier", None)
    return notifier if notifier is not None else LogOnlyDeadlineNotifier()


def build_workspace_service(
    db: AsyncSession, notifier: IDeadlineNotifier | None = None
) -> WorkspaceService:
    """Wire WorkspaceService to SQLAlchemy repositories sharing one session."""
    return WorkspaceService(
        workspace_repo=WorkspaceRepository(db),
        document_repo=WorkspaceDocumentRepository(db),
        checklist_repo=ChecklistRepository(db),
        approval_repo=ApprovalRepository(db),
        filing_repo=FilingRecordRepository(db),
        comment_repo=CommentRepository(db),
        transition_repo=PhaseTransitionRepository(db),
        activity_repo=ActivityRepository(db),
        thesis_repo=ThesisRepository(db),
        draft_version_repo=DraftVersionRepository(db),
        deadline_notifier=notifier,
    )


async def get_workspace_service(
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
    notifier: Annotated[IDeadlineNotifier, Depends(get_deadline_notifier)],
) -> WorkspaceService:
    """WorkspaceService for writes (commit on success, rollback on error)."""
    return build_workspace_service(db, notifier)


async def get_workspace_query_service(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> WorkspaceService:
    """WorkspaceService for reads (no transaction)."""
    return build_workspace_service(db)


def get_upload_service() -> FileUploadService:
    """Upload validation + local storage from settings."""
    settings = get_settings()
    storage = LocalStorageService(
        storage_root=settings.storage_root,
        base_url=settings.storage_base_url,
    )
    return FileUploadService(storage, settings)
