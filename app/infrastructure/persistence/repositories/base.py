"""Base repository: ORM access shared by the workspace repositories."""

from typing import Any, Generic, TypeVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.exceptions import ResourceNotFoundException
from app.infrastructure.persistence.database import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """Base repository with ORM lookups and insert/save/delete.

    Subclasses map ORM rows to domain entities.
    """

    def __init__(self, db: AsyncSession, model: type[ModelType]) -> None:
        self.db = db
        self.model = model

    async def _get_orm(self, entity_id: str) -> ModelType | None:
        """Return a single ORM row by primary key, or None."""
        model: Any = self.model
        result = await self.db.execute(select(self.model).where(model.id == entity_id))
        return result.scalar_one_or_none()

    async def _require_orm(self, entity_id: str, resource_type: str) -> ModelType:
        """Return the ORM row or raise ResourceNotFoundException."""
        obj = await self._get_orm(entity_id)
        if obj is None:
            raise ResourceNotFoundException(resource_type, entity_id)
        return obj

    async def _list_by_workspace(
        self, workspace_id: str, *order_by: Any
    ) -> list[ModelType]:
        """Return every row of a workspace child table in the given order."""
        model: Any = self.model
        result = await self.db.execute(
            select(self.model).where(model.workspace_id == workspace_id).order_by(*order_by)
        )
        return list(result.scalars().all())

    async def _insert(self, obj: ModelType) -> ModelType:
        """Persist a new row and reload server defaults."""
        self.db.add(obj)
        await self.db.flush()
        await self.db.refresh(obj)
        return obj

    async def _save(self, obj: ModelType) -> ModelType:
        """Flush pending changes of an attached row."""
        await self.db.flush()
        await self.db.refresh(obj)
        return obj

    async def _delete(self, obj: ModelType) -> None:
        """Delete the row and flush."""
        await self.db.delete(obj)
        await self.db.flush()
