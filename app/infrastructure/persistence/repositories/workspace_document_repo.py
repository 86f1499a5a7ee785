"""Workspace document repository. Rows are never deleted; removal is a stamp."""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.entities.workspace import DocumentEntity
from app.domain.enums import WorkspacePhase
from app.infrastructure.persistence.models.workspace import WorkspaceDocument
from app.infrastructure.persistence.repositories.base import BaseRepository

_MUTABLE_FIELDS = (
    "title",
    "description",
    "category",
    "storage_url",
    "file_name",
    "file_size",
    "mime_type",
    "is_superseded",
    "is_validated",
    "validated_by",
    "validated_at",
    "removed_at",
    "removed_by",
    "updated_at",
)


def _document_to_entity(d: WorkspaceDocument) -> DocumentEntity:
    """Map ORM WorkspaceDocument to domain DocumentEntity."""
    return DocumentEntity(
        id=d.id,
        workspace_id=d.workspace_id,
        title=d.title,
        origin_phase=WorkspacePhase(d.origin_phase),
        storage_url=d.storage_url,
        file_name=d.file_name,
        file_size=d.file_size,
        mime_type=d.mime_type,
        category=d.category,
        description=d.description,
        is_principal=d.is_principal,
        is_superseded=d.is_superseded,
        replaces_document_id=d.replaces_document_id,
        is_validated=d.is_validated,
        validated_by=d.validated_by,
        validated_at=d.validated_at,
        uploaded_by=d.uploaded_by,
        removed_at=d.removed_at,
        removed_by=d.removed_by,
        created_at=d.created_at,
        updated_at=d.updated_at,
    )


class WorkspaceDocumentRepository(BaseRepository[WorkspaceDocument]):
    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, WorkspaceDocument)

    async def list_by_workspace(self, workspace_id: str) -> list[DocumentEntity]:
        rows = await self._list_by_workspace(
            workspace_id, WorkspaceDocument.created_at, WorkspaceDocument.id
        )
        return [_document_to_entity(r) for r in rows]

    async def create(self, document: DocumentEntity) -> DocumentEntity:
        orm = WorkspaceDocument(
            id=document.id,
            workspace_id=document.workspace_id,
            title=document.title,
            origin_phase=document.origin_phase.value,
            is_principal=document.is_principal,
            replaces_document_id=document.replaces_document_id,
            uploaded_by=document.uploaded_by,
            created_at=document.created_at,
        )
        for name in _MUTABLE_FIELDS:
            setattr(orm, name, getattr(document, name))
        return _document_to_entity(await self._insert(orm))

    async def update(self, document: DocumentEntity) -> DocumentEntity:
        orm = await self._require_orm(document.id, "document")
        for name in _MUTABLE_FIELDS:
            setattr(orm, name, getattr(document, name))
        return _document_to_entity(await self._save(orm))
