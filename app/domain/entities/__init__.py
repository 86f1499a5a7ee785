"""Domain entities and aggregates.

Pure domain models; no ORM or persistence concerns.
"""

from app.domain.entities.workspace import (
    ActivityEntity,
    ApprovalRequestEntity,
    ChecklistItemEntity,
    CommentEntity,
    DocumentEntity,
    FilingRecordEntity,
    PhaseTransitionEntity,
    WorkspaceAggregate,
    WorkspaceEntity,
)

__all__ = [
    "ActivityEntity",
    "ApprovalRequestEntity",
    "ChecklistItemEntity",
    "CommentEntity",
    "DocumentEntity",
    "FilingRecordEntity",
    "PhaseTransitionEntity",
    "WorkspaceAggregate",
    "WorkspaceEntity",
]
