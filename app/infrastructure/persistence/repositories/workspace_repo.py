"""Workspace repository: get-or-create lookups and the versioned claim."""

from __future__ import annotations

from enum import Enum
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.entities.workspace import WorkspaceEntity
from app.domain.enums import WorkspacePhase
from app.domain.exceptions import ConcurrentModificationException
from app.infrastructure.persistence.models.workspace import Workspace
from app.infrastructure.persistence.repositories.base import BaseRepository

_CLAIMABLE_COLUMNS = frozenset(
    {
        "phase",
        "locked",
        "locked_by",
        "locked_at",
        "principal_document_id",
        "phase_changed_at",
        "phase_changed_by",
        "responsible_id",
        "content_json",
        "content_html",
        "content_saved_at",
        "content_saved_by",
        "word_count",
        "char_count",
        "updated_at",
    }
)


def _workspace_to_entity(w: Workspace) -> WorkspaceEntity:
    """Map ORM Workspace to domain WorkspaceEntity."""
    return WorkspaceEntity(
        id=w.id,
        deadline_id=w.deadline_id,
        phase=WorkspacePhase(w.phase),
        locked=w.locked,
        version=w.version,
        deadline_type=w.deadline_type,
        locked_by=w.locked_by,
        locked_at=w.locked_at,
        principal_document_id=w.principal_document_id,
        phase_changed_at=w.phase_changed_at,
        phase_changed_by=w.phase_changed_by,
        responsible_id=w.responsible_id,
        content_json=w.content_json,
        content_html=w.content_html,
        content_saved_at=w.content_saved_at,
        content_saved_by=w.content_saved_by,
        word_count=w.word_count,
        char_count=w.char_count,
        created_at=w.created_at,
        updated_at=w.updated_at,
    )


class WorkspaceRepository(BaseRepository[Workspace]):
    """Workspace root repository. Every mutation goes through claim()."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, Workspace)

    async def get_by_id(self, workspace_id: str) -> WorkspaceEntity | None:
        # populate_existing: the claim UPDATE bypasses the identity map.
        result = await self.db.execute(
            select(Workspace)
            .where(Workspace.id == workspace_id)
            .execution_options(populate_existing=True)
        )
        row = result.scalar_one_or_none()
        return _workspace_to_entity(row) if row else None

    async def get_by_deadline(self, deadline_id: str) -> WorkspaceEntity | None:
        result = await self.db.execute(
            select(Workspace)
            .where(Workspace.deadline_id == deadline_id)
            .execution_options(populate_existing=True)
        )
        row = result.scalar_one_or_none()
        return _workspace_to_entity(row) if row else None

    async def create(self, workspace: WorkspaceEntity) -> WorkspaceEntity:
        """Insert in a savepoint; a duplicate deadline surfaces as ConcurrentModificationException."""
        orm = Workspace(
            id=workspace.id,
            deadline_id=workspace.deadline_id,
            deadline_type=workspace.deadline_type,
            phase=workspace.phase.value,
            locked=workspace.locked,
            version=workspace.version,
            phase_changed_at=workspace.phase_changed_at,
            phase_changed_by=workspace.phase_changed_by,
            responsible_id=workspace.responsible_id,
            created_at=workspace.created_at,
            updated_at=workspace.updated_at,
        )
        try:
            async with self.db.begin_nested():
                created = await self._insert(orm)
        except IntegrityError as e:
            raise ConcurrentModificationException(workspace.id, workspace.version) from e
        return _workspace_to_entity(created)

    async def claim(
        self, workspace_id: str, read_version: int, **changes: Any
    ) -> int | None:
        """Bump version (and apply changes) only if it still equals read_version.

        Returns the new version, or None when another writer won the race.
        """
        unknown = set(changes) - _CLAIMABLE_COLUMNS
        if unknown:
            raise ValueError(f"Cannot claim workspace with columns: {sorted(unknown)}")
        values = {
            key: value.value if isinstance(value, Enum) else value
            for key, value in changes.items()
        }
        stmt = (
            update(Workspace)
            .where(Workspace.id == workspace_id, Workspace.version == read_version)
            .values(version=Workspace.version + 1, **values)
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        if result.rowcount != 1:
            return None
        return read_version + 1
