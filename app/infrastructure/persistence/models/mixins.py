"""Column mixins shared by the workspace tables."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, declared_attr, mapped_column
from sqlalchemy.sql import func

from app.shared.utils.generators import generate_cuid


class CuidMixin:
    """String primary key filled with a fresh CUID."""

    @declared_attr
    def id(cls) -> Mapped[str]:
        return mapped_column(String, primary_key=True, default=generate_cuid)


class CreatedAtMixin:
    """Insert time only; used by the append-only activity and transition tables."""

    @declared_attr
    def created_at(cls) -> Mapped[datetime]:
        return mapped_column(
            DateTime(timezone=True), server_default=func.now(), nullable=False
        )


class TimestampMixin(CreatedAtMixin):
    """Insert and last-update times, set by the database."""

    @declared_attr
    def updated_at(cls) -> Mapped[datetime]:
        return mapped_column(
            DateTime(timezone=True),
            server_default=func.now(),
            onupdate=func.now(),
            nullable=False,
        )


class VersionedMixin:
    """Optimistic-concurrency counter; every accepted workspace write bumps it by one."""

    @declared_attr
    def version(cls) -> Mapped[int]:
        return mapped_column(Integer, default=1, nullable=False)


class WorkspaceChildMixin:
    """Owning workspace; child rows go with it."""

    @declared_attr
    def workspace_id(cls) -> Mapped[str]:
        return mapped_column(
            String,
            ForeignKey("workspace.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        )
