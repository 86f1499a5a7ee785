"""Append-only history repositories: phase transitions and activity log."""

from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.entities.workspace import ActivityEntity, PhaseTransitionEntity
from app.domain.enums import ActivityAction, WorkspacePhase
from app.infrastructure.persistence.models.workspace import (
    WorkspaceActivity,
    WorkspacePhaseTransition,
)
from app.infrastructure.persistence.repositories.base import BaseRepository


def _transition_to_entity(t: WorkspacePhaseTransition) -> PhaseTransitionEntity:
    return PhaseTransitionEntity(
        id=t.id,
        workspace_id=t.workspace_id,
        from_phase=WorkspacePhase(t.from_phase),
        to_phase=WorkspacePhase(t.to_phase),
        actor_id=t.actor_id,
        reason=t.reason,
        created_at=t.created_at,
    )


def _activity_to_entity(a: WorkspaceActivity) -> ActivityEntity:
    return ActivityEntity(
        id=a.id,
        workspace_id=a.workspace_id,
        action=ActivityAction(a.action),
        description=a.description,
        actor_id=a.actor_id,
        metadata=dict(a.metadata_ or {}),
        created_at=a.created_at,
    )


class PhaseTransitionRepository(BaseRepository[WorkspacePhaseTransition]):
    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, WorkspacePhaseTransition)

    async def list_by_workspace(self, workspace_id: str) -> list[PhaseTransitionEntity]:
        rows = await self._list_by_workspace(
            workspace_id, WorkspacePhaseTransition.created_at, WorkspacePhaseTransition.id
        )
        return [_transition_to_entity(r) for r in rows]

    async def append(self, transition: PhaseTransitionEntity) -> PhaseTransitionEntity:
        orm = WorkspacePhaseTransition(
            id=transition.id,
            workspace_id=transition.workspace_id,
            from_phase=transition.from_phase.value,
            to_phase=transition.to_phase.value,
            actor_id=transition.actor_id,
            reason=transition.reason,
            created_at=transition.created_at,
        )
        return _transition_to_entity(await self._insert(orm))


class ActivityRepository(BaseRepository[WorkspaceActivity]):
    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, WorkspaceActivity)

    async def append(self, activity: ActivityEntity) -> ActivityEntity:
        orm = WorkspaceActivity(
            id=activity.id,
            workspace_id=activity.workspace_id,
            action=activity.action.value,
            description=activity.description,
            actor_id=activity.actor_id,
            metadata_=dict(activity.metadata),
            created_at=activity.created_at,
        )
        return _activity_to_entity(await self._insert(orm))

    async def list_page(
        self,
        workspace_id: str,
        action: ActivityAction | None = None,
        skip: int = 0,
        limit: int = 50,
    ) -> tuple[list[ActivityEntity], int]:
        """Return (entries newest first, total matching count)."""
        conditions = [WorkspaceActivity.workspace_id == workspace_id]
        if action is not None:
            conditions.append(WorkspaceActivity.action == action.value)
        total = await self.db.scalar(
            select(func.count(WorkspaceActivity.id)).where(*conditions)
        )
        result = await self.db.execute(
            select(WorkspaceActivity)
            .where(*conditions)
            .order_by(WorkspaceActivity.created_at.desc(), WorkspaceActivity.id.desc())
            .offset(skip)
            .limit(limit)
        )
        return [_activity_to_entity(r) for r in result.scalars().all()], total or 0
