"""Repository interfaces (ports) for the application layer.

Protocols define contracts that infrastructure implementations must fulfill (DIP).
All types reference domain entities only; no infrastructure imports.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from app.domain.entities.workspace import (
        ActivityEntity,
        ApprovalRequestEntity,
        ChecklistItemEntity,
        CommentEntity,
        DocumentEntity,
        DraftVersionEntity,
        FilingRecordEntity,
        PhaseTransitionEntity,
        ThesisEntity,
        WorkspaceEntity,
    )
    from app.domain.enums import ActivityAction


# Workspace repository interface
class IWorkspaceRepository(Protocol):
    """Protocol for the workspace root (DIP)."""

    async def get_by_id(self, workspace_id: str) -> WorkspaceEntity | None:
        """Return workspace by ID."""

    async def get_by_deadline(self, deadline_id: str) -> WorkspaceEntity | None:
        """Return the workspace of a deadline, if one was created."""

    async def create(self, workspace: WorkspaceEntity) -> WorkspaceEntity:
        """Insert a new workspace row.

        Raises ConcurrentModificationException if a workspace for the same
        deadline was inserted concurrently.
        """

    async def claim(
        self, workspace_id: str, read_version: int, **changes: Any
    ) -> int | None:
        """Conditionally bump version (and apply changes) iff version == read_version.

        Returns the new version, or None when another writer got there first.
        """


# Document repository interface
class IWorkspaceDocumentRepository(Protocol):
    """Protocol for workspace documents; history rows are never deleted."""

    async def list_by_workspace(self, workspace_id: str) -> list[DocumentEntity]:
        """Return every document (including superseded and removed), oldest first."""

    async def create(self, document: DocumentEntity) -> DocumentEntity:
        """Insert a document row."""

    async def update(self, document: DocumentEntity) -> DocumentEntity:
        """Persist mutable fields (title, flags, file reference, removal stamp)."""


# Checklist repository interface
class IChecklistRepository(Protocol):
    """Protocol for workspace checklist items."""

    async def list_by_workspace(self, workspace_id: str) -> list[ChecklistItemEntity]:
        """Return items ordered by position."""

    async def create_many(
        self, items: list[ChecklistItemEntity]
    ) -> list[ChecklistItemEntity]:
        """Insert several items (template seeding or a single manual add)."""

    async def update(self, item: ChecklistItemEntity) -> ChecklistItemEntity:
        """Persist checked state."""

    async def delete(self, item_id: str) -> None:
        """Delete an item."""


# Approval repository interface
class IApprovalRepository(Protocol):
    """Protocol for approval requests."""

    async def list_by_workspace(self, workspace_id: str) -> list[ApprovalRequestEntity]:
        """Return requests ordered by round."""

    async def create(self, approval: ApprovalRequestEntity) -> ApprovalRequestEntity:
        """Insert a PENDING request."""

    async def update(self, approval: ApprovalRequestEntity) -> ApprovalRequestEntity:
        """Persist a decision."""


# Filing record repository interface
class IFilingRecordRepository(Protocol):
    """Protocol for the single filing record of a workspace."""

    async def get_by_workspace(self, workspace_id: str) -> FilingRecordEntity | None:
        """Return the record, or None before registration."""

    async def upsert(self, record: FilingRecordEntity) -> FilingRecordEntity:
        """Insert or overwrite the record of record.workspace_id."""


# Comment repository interface
class ICommentRepository(Protocol):
    """Protocol for workspace comments."""

    async def list_by_workspace(self, workspace_id: str) -> list[CommentEntity]:
        """Return all comments (flat, oldest first)."""

    async def create(self, comment: CommentEntity) -> CommentEntity:
        """Insert a comment."""

    async def update(self, comment: CommentEntity) -> CommentEntity:
        """Persist resolution state."""


# Thesis repository interface
class IThesisRepository(Protocol):
    """Protocol for the legal theses of a workspace."""

    async def list_by_workspace(self, workspace_id: str) -> list[ThesisEntity]:
        """Return theses ordered by position."""

    async def create(self, thesis: ThesisEntity) -> ThesisEntity:
        """Insert a thesis."""

    async def update(self, thesis: ThesisEntity) -> ThesisEntity:
        """Persist every editable field, position included."""

    async def delete(self, thesis_id: str) -> None:
        """Delete a thesis."""


# Draft version repository interface (append-only)
class IDraftVersionRepository(Protocol):
    """Protocol for saved snapshots of the draft content."""

    async def list_by_workspace(self, workspace_id: str) -> list[DraftVersionEntity]:
        """Return versions, newest first."""

    async def get_by_id(self, version_id: str) -> DraftVersionEntity | None:
        """Return a version by ID."""

    async def append(self, version: DraftVersionEntity) -> DraftVersionEntity:
        """Append one version."""


# Phase transition repository interface (append-only)
class IPhaseTransitionRepository(Protocol):
    """Protocol for the phase change audit trail."""

    async def list_by_workspace(self, workspace_id: str) -> list[PhaseTransitionEntity]:
        """Return transitions, oldest first."""

    async def append(self, transition: PhaseTransitionEntity) -> PhaseTransitionEntity:
        """Append one transition."""


# Activity repository interface (append-only)
class IActivityRepository(Protocol):
    """Protocol for the workspace activity log."""

    async def append(self, activity: ActivityEntity) -> ActivityEntity:
        """Append one activity entry."""

    async def list_page(
        self,
        workspace_id: str,
        action: ActivityAction | None = None,
        skip: int = 0,
        limit: int = 50,
    ) -> tuple[list[ActivityEntity], int]:
        """Return (entries newest first, total matching count)."""
