"""Checklist item repository."""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.entities.workspace import ChecklistItemEntity
from app.infrastructure.persistence.models.workspace import WorkspaceChecklistItem
from app.infrastructure.persistence.repositories.base import BaseRepository


def _item_to_entity(i: WorkspaceChecklistItem) -> ChecklistItemEntity:
    """Map ORM WorkspaceChecklistItem to domain ChecklistItemEntity."""
    return ChecklistItemEntity(
        id=i.id,
        workspace_id=i.workspace_id,
        title=i.title,
        category=i.category,
        checked=i.checked,
        blocking=i.blocking,
        is_required=i.is_required,
        position=i.position,
        template_source=i.template_source,
        checked_by=i.checked_by,
        checked_at=i.checked_at,
        created_at=i.created_at,
    )


class ChecklistRepository(BaseRepository[WorkspaceChecklistItem]):
    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, WorkspaceChecklistItem)

    async def list_by_workspace(self, workspace_id: str) -> list[ChecklistItemEntity]:
        rows = await self._list_by_workspace(
            workspace_id, WorkspaceChecklistItem.position, WorkspaceChecklistItem.id
        )
        return [_item_to_entity(r) for r in rows]

    async def create_many(
        self, items: list[ChecklistItemEntity]
    ) -> list[ChecklistItemEntity]:
        """Insert items in one flush (template seeding)."""
        rows = [
            WorkspaceChecklistItem(
                id=i.id,
                workspace_id=i.workspace_id,
                title=i.title,
                category=i.category,
                checked=i.checked,
                blocking=i.blocking,
                is_required=i.is_required,
                position=i.position,
                template_source=i.template_source,
                checked_by=i.checked_by,
                checked_at=i.checked_at,
                created_at=i.created_at,
            )
            for i in items
        ]
        self.db.add_all(rows)
        await self.db.flush()
        return [_item_to_entity(r) for r in rows]

    async def update(self, item: ChecklistItemEntity) -> ChecklistItemEntity:
        orm = await self._require_orm(item.id, "checklist_item")
        orm.checked = item.checked
        orm.checked_by = item.checked_by
        orm.checked_at = item.checked_at
        return _item_to_entity(await self._save(orm))

    async def delete(self, item_id: str) -> None:
        orm = await self._require_orm(item_id, "checklist_item")
        await self._delete(orm)
