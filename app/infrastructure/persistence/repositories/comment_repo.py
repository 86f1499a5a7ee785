"""Workspace comment repository."""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.entities.workspace import CommentEntity
from app.infrastructure.persistence.models.workspace import WorkspaceComment
from app.infrastructure.persistence.repositories.base import BaseRepository


def _comment_to_entity(c: WorkspaceComment) -> CommentEntity:
    """Map ORM WorkspaceComment to domain CommentEntity (replies are threaded by the use case)."""
    return CommentEntity(
        id=c.id,
        workspace_id=c.workspace_id,
        content=c.content,
        author_id=c.author_id,
        kind=c.kind,
        parent_id=c.parent_id,
        resolved=c.resolved,
        resolved_by=c.resolved_by,
        resolved_at=c.resolved_at,
        created_at=c.created_at,
    )


class CommentRepository(BaseRepository[WorkspaceComment]):
    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, WorkspaceComment)

    async def list_by_workspace(self, workspace_id: str) -> list[CommentEntity]:
        rows = await self._list_by_workspace(
            workspace_id, WorkspaceComment.created_at, WorkspaceComment.id
        )
        return [_comment_to_entity(r) for r in rows]

    async def create(self, comment: CommentEntity) -> CommentEntity:
        orm = WorkspaceComment(
            id=comment.id,
            workspace_id=comment.workspace_id,
            content=comment.content,
            author_id=comment.author_id,
            kind=comment.kind,
            parent_id=comment.parent_id,
            resolved=comment.resolved,
            created_at=comment.created_at,
        )
        return _comment_to_entity(await self._insert(orm))

    async def update(self, comment: CommentEntity) -> CommentEntity:
        orm = await self._require_orm(comment.id, "comment")
        orm.resolved = comment.resolved
        orm.resolved_by = comment.resolved_by
        orm.resolved_at = comment.resolved_at
        return _comment_to_entity(await self._save(orm))
