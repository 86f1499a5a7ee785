"""Draft version repository (append-only snapshots of the workspace draft)."""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.entities.workspace import DraftVersionEntity
from app.infrastructure.persistence.models.workspace import WorkspaceDraftVersion
from app.infrastructure.persistence.repositories.base import BaseRepository


def _version_to_entity(v: WorkspaceDraftVersion) -> DraftVersionEntity:
    return DraftVersionEntity(
        id=v.id,
        workspace_id=v.workspace_id,
        version_number=v.version_number,
        title=v.title,
        content_json=v.content_json,
        content_html=v.content_html,
        word_count=v.word_count,
        change_summary=v.change_summary,
        created_by=v.created_by,
        created_at=v.created_at,
    )


class DraftVersionRepository(BaseRepository[WorkspaceDraftVersion]):
    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, WorkspaceDraftVersion)

    async def list_by_workspace(self, workspace_id: str) -> list[DraftVersionEntity]:
        rows = await self._list_by_workspace(
            workspace_id, WorkspaceDraftVersion.version_number.desc()
        )
        return [_version_to_entity(r) for r in rows]

    async def get_by_id(self, version_id: str) -> DraftVersionEntity | None:
        row = await self._get_orm(version_id)
        return _version_to_entity(row) if row else None

    async def append(self, version: DraftVersionEntity) -> DraftVersionEntity:
        orm = WorkspaceDraftVersion(
            id=version.id,
            workspace_id=version.workspace_id,
            version_number=version.version_number,
            title=version.title,
            content_json=version.content_json,
            content_html=version.content_html,
            word_count=version.word_count,
            change_summary=version.change_summary,
            created_by=version.created_by,
            created_at=version.created_at,
        )
        return _version_to_entity(await self._insert(orm))
