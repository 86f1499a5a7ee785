"""Domain layer: entities, enums, and exceptions.

No dependencies on infrastructure or presentation. Used by application
and infrastructure layers.
"""

from app.domain.entities import (
    ApprovalRequestEntity,
    ChecklistItemEntity,
    DocumentEntity,
    FilingRecordEntity,
    WorkspaceAggregate,
    WorkspaceEntity,
)
from app.domain.enums import ApprovalStatus, EditCapability, WorkspacePhase
from app.domain.exceptions import (
    ConcurrentModificationException,
    InvalidTransitionException,
    PermissionDeniedException,
    PreconditionFailedException,
    ResourceNotFoundException,
    ValidationException,
    WorkspaceException,
    WorkspaceLockedException,
)

__all__ = [
    # Entities
    "ApprovalRequestEntity",
    "ChecklistItemEntity",
    "DocumentEntity",
    "FilingRecordEntity",
    "WorkspaceAggregate",
    "WorkspaceEntity",
    # Enums
    "ApprovalStatus",
    "EditCapability",
    "WorkspacePhase",
    # Exceptions
    "ConcurrentModificationException",
    "InvalidTransitionException",
    "PermissionDeniedException",
    "PreconditionFailedException",
    "ResourceNotFoundException",
    "ValidationException",
    "WorkspaceException",
    "WorkspaceLockedException",
]
