"""Approval request repository."""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.entities.workspace import ApprovalRequestEntity
from app.domain.enums import ApprovalStatus
from app.infrastructure.persistence.models.workspace import WorkspaceApproval
from app.infrastructure.persistence.repositories.base import BaseRepository


def _approval_to_entity(a: WorkspaceApproval) -> ApprovalRequestEntity:
    """Map ORM WorkspaceApproval to domain ApprovalRequestEntity."""
    return ApprovalRequestEntity(
        id=a.id,
        workspace_id=a.workspace_id,
        round=a.round,
        approver_id=a.approver_id,
        status=ApprovalStatus(a.status),
        requested_by=a.requested_by,
        feedback=a.feedback,
        corrections_required=a.corrections_required,
        decided_by=a.decided_by,
        decided_at=a.decided_at,
        requested_at=a.requested_at,
    )


class ApprovalRepository(BaseRepository[WorkspaceApproval]):
    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, WorkspaceApproval)

    async def list_by_workspace(self, workspace_id: str) -> list[ApprovalRequestEntity]:
        rows = await self._list_by_workspace(workspace_id, WorkspaceApproval.round)
        return [_approval_to_entity(r) for r in rows]

    async def create(self, approval: ApprovalRequestEntity) -> ApprovalRequestEntity:
        orm = WorkspaceApproval(
            id=approval.id,
            workspace_id=approval.workspace_id,
            round=approval.round,
            approver_id=approval.approver_id,
            status=approval.status.value,
            requested_by=approval.requested_by,
            requested_at=approval.requested_at,
        )
        return _approval_to_entity(await self._insert(orm))

    async def update(self, approval: ApprovalRequestEntity) -> ApprovalRequestEntity:
        orm = await self._require_orm(approval.id, "approval")
        orm.status = approval.status.value
        orm.feedback = approval.feedback
        orm.corrections_required = approval.corrections_required
        orm.decided_by = approval.decided_by
        orm.decided_at = approval.decided_at
        return _approval_to_entity(await self._save(orm))
