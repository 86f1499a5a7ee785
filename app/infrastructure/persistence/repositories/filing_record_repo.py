"""Filing record repository (one row per workspace)."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.entities.workspace import FilingRecordEntity
from app.infrastructure.persistence.models.workspace import WorkspaceFilingRecord
from app.infrastructure.persistence.repositories.base import BaseRepository


def _record_to_entity(r: WorkspaceFilingRecord) -> FilingRecordEntity:
    """Map ORM WorkspaceFilingRecord to domain FilingRecordEntity."""
    return FilingRecordEntity(
        workspace_id=r.workspace_id,
        system=r.system,
        number=r.number,
        filed_at=r.filed_at,
        receipt_url=r.receipt_url,
        registered_by=r.registered_by,
        registered_at=r.registered_at,
    )


class FilingRecordRepository(BaseRepository[WorkspaceFilingRecord]):
    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, WorkspaceFilingRecord)

    async def _get_orm_by_workspace(
        self, workspace_id: str
    ) -> WorkspaceFilingRecord | None:
        result = await self.db.execute(
            select(WorkspaceFilingRecord).where(
                WorkspaceFilingRecord.workspace_id == workspace_id
            )
        )
        return result.scalar_one_or_none()

    async def get_by_workspace(self, workspace_id: str) -> FilingRecordEntity | None:
        row = await self._get_orm_by_workspace(workspace_id)
        return _record_to_entity(row) if row else None

    async def upsert(self, record: FilingRecordEntity) -> FilingRecordEntity:
        """Overwrite the workspace's record, inserting it on first registration."""
        orm = await self._get_orm_by_workspace(record.workspace_id)
        is_new = orm is None
        if orm is None:
            orm = WorkspaceFilingRecord(workspace_id=record.workspace_id)
        orm.system = record.system
        orm.number = record.number
        orm.filed_at = record.filed_at
        orm.receipt_url = record.receipt_url
        orm.registered_by = record.registered_by
        orm.registered_at = record.registered_at
        saved = await self._insert(orm) if is_new else await self._save(orm)
        return _record_to_entity(saved)
