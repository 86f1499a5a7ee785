"""Application DTOs (no ORM dependency)."""

from app.application.dtos.workspace import (
    ActivityPage,
    BlockingCondition,
    DeadlineFulfilment,
    DocumentInput,
    DocumentPermission,
    FileReference,
    WorkspacePermissions,
    WorkspaceStats,
)

__all__ = [
    "ActivityPage",
    "BlockingCondition",
    "DeadlineFulfilment",
    "DocumentInput",
    "DocumentPermission",
    "FileReference",
    "WorkspacePermissions",
    "WorkspaceStats",
]
