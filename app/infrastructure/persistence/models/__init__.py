"""Persistence models: ORM entities and mixins."""

from app.infrastructure.persistence.models.mixins import (
    CreatedAtMixin,
    CuidMixin,
    TimestampMixin,
    VersionedMixin,
    WorkspaceChildMixin,
)
from app.infrastructure.persistence.models.workspace import (
    Workspace,
    WorkspaceActivity,
    WorkspaceApproval,
    WorkspaceChecklistItem,
    WorkspaceComment,
    WorkspaceDocument,
    WorkspaceDraftVersion,
    WorkspaceFilingRecord,
    WorkspacePhaseTransition,
    WorkspaceThesis,
)

__all__ = [
    "CreatedAtMixin",
    "CuidMixin",
    "TimestampMixin",
    "VersionedMixin",
    "Workspace",
    "WorkspaceActivity",
    "WorkspaceApproval",
    "WorkspaceChecklistItem",
    "WorkspaceChildMixin",
    "WorkspaceComment",
    "WorkspaceDocument",
    "WorkspaceDraftVersion",
    "WorkspaceFilingRecord",
    "WorkspacePhaseTransition",
    "WorkspaceThesis",
]
