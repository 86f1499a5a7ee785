"""Thesis repository."""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.entities.workspace import ThesisEntity
from app.domain.enums import ThesisKind, ThesisStatus, ThesisStrength
from app.infrastructure.persistence.models.workspace import WorkspaceThesis
from app.infrastructure.persistence.repositories.base import BaseRepository

_EDITABLE = (
    "title",
    "issue",
    "rule",
    "analysis",
    "conclusion",
    "position",
)


def _thesis_to_entity(t: WorkspaceThesis) -> ThesisEntity:
    """Map ORM WorkspaceThesis to domain ThesisEntity."""
    return ThesisEntity(
        id=t.id,
        workspace_id=t.workspace_id,
        title=t.title,
        kind=ThesisKind(t.kind),
        status=ThesisStatus(t.status),
        issue=t.issue,
        rule=t.rule,
        analysis=t.analysis,
        conclusion=t.conclusion,
        legal_refs=list(t.legal_refs or []),
        case_refs=list(t.case_refs or []),
        doctrine_refs=list(t.doctrine_refs or []),
        strength=ThesisStrength(t.strength) if t.strength else None,
        position=t.position,
        created_by=t.created_by,
        created_at=t.created_at,
        updated_at=t.updated_at,
    )


class ThesisRepository(BaseRepository[WorkspaceThesis]):
    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, WorkspaceThesis)

    async def list_by_workspace(self, workspace_id: str) -> list[ThesisEntity]:
        rows = await self._list_by_workspace(
            workspace_id, WorkspaceThesis.position, WorkspaceThesis.created_at
        )
        return [_thesis_to_entity(r) for r in rows]

    async def create(self, thesis: ThesisEntity) -> ThesisEntity:
        orm = WorkspaceThesis(
            id=thesis.id,
            workspace_id=thesis.workspace_id,
            title=thesis.title,
            kind=thesis.kind.value,
            status=thesis.status.value,
            issue=thesis.issue,
            rule=thesis.rule,
            analysis=thesis.analysis,
            conclusion=thesis.conclusion,
            legal_refs=list(thesis.legal_refs),
            case_refs=list(thesis.case_refs),
            doctrine_refs=list(thesis.doctrine_refs),
            strength=thesis.strength.value if thesis.strength else None,
            position=thesis.position,
            created_by=thesis.created_by,
        )
        return _thesis_to_entity(await self._insert(orm))

    async def update(self, thesis: ThesisEntity) -> ThesisEntity:
        orm = await self._require_orm(thesis.id, "thesis")
        for name in _EDITABLE:
            setattr(orm, name, getattr(thesis, name))
        orm.kind = thesis.kind.value
        orm.status = thesis.status.value
        orm.strength = thesis.strength.value if thesis.strength else None
        orm.legal_refs = list(thesis.legal_refs)
        orm.case_refs = list(thesis.case_refs)
        orm.doctrine_refs = list(thesis.doctrine_refs)
        return _thesis_to_entity(await self._save(orm))

    async def delete(self, thesis_id: str) -> None:
        orm = await self._require_orm(thesis_id, "thesis")
        await self._delete(orm)
