"""Workspace ORM models: the workspace root and its child tables.

Phase transitions, activities and draft versions are append-only; documents are never hard
deleted (removal stamps removed_at).
"""

from datetime import datetime
from typing import Any

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Connection,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    event,
    text,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, Mapper, mapped_column

from app.domain.enums import WorkspacePhase
from app.infrastructure.persistence.database import Base
from app.infrastructure.persistence.models.mixins import (
    CreatedAtMixin,
    CuidMixin,
    TimestampMixin,
    VersionedMixin,
    WorkspaceChildMixin,
)

_PHASE_VALUES = ", ".join(f"'{p}'" for p in WorkspacePhase.values())


class Workspace(CuidMixin, TimestampMixin, VersionedMixin, Base):
    """Workspace root. Table: workspace. One per deadline; version guards every mutation."""

    __tablename__ = "workspace"

    deadline_id: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    deadline_type: Mapped[str | None] = mapped_column(String, nullable=True)
    phase: Mapped[str] = mapped_column(
        String, nullable=False, default=WorkspacePhase.DRAFT.value, index=True
    )
    locked: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    locked_by: Mapped[str | None] = mapped_column(String, nullable=True)
    locked_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    principal_document_id: Mapped[str | None] = mapped_column(String, nullable=True)
    phase_changed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    phase_changed_by: Mapped[str | None] = mapped_column(String, nullable=True)
    responsible_id: Mapped[str | None] = mapped_column(String, nullable=True, index=True)
    content_json: Mapped[Any | None] = mapped_column(JSONB, nullable=True)
    content_html: Mapped[str | None] = mapped_column(Text, nullable=True)
    content_saved_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    content_saved_by: Mapped[str | None] = mapped_column(String, nullable=True)
    word_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    char_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    __table_args__ = (
        CheckConstraint(f"phase IN ({_PHASE_VALUES})", name="ck_workspace_phase"),
    )


class WorkspaceDocument(CuidMixin, WorkspaceChildMixin, TimestampMixin, Base):
    """Document attached to a workspace. Table: workspace_document."""

    __tablename__ = "workspace_document"

    title: Mapped[str] = mapped_column(String, nullable=False)
    origin_phase: Mapped[str] = mapped_column(String, nullable=False)
    storage_url: Mapped[str | None] = mapped_column(String, nullable=True)
    file_name: Mapped[str | None] = mapped_column(String, nullable=True)
    file_size: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    mime_type: Mapped[str | None] = mapped_column(String, nullable=True)
    category: Mapped[str] = mapped_column(String, nullable=False, default="ANEXO")
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_principal: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_superseded: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    replaces_document_id: Mapped[str | None] = mapped_column(
        String, ForeignKey("workspace_document.id"), nullable=True
    )
    is_validated: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    validated_by: Mapped[str | None] = mapped_column(String, nullable=True)
    validated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    uploaded_by: Mapped[str | None] = mapped_column(String, nullable=True)
    removed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    removed_by: Mapped[str | None] = mapped_column(String, nullable=True)

    __table_args__ = (
        Index("ix_workspace_document_workspace_created", "workspace_id", "created_at"),
        # At most one current principal per workspace.
        Index(
            "uq_workspace_document_current_principal",
            "workspace_id",
            unique=True,
            postgresql_where=text(
                "is_principal AND NOT is_superseded AND removed_at IS NULL"
            ),
        ),
        CheckConstraint("file_size >= 0", name="ck_workspace_document_file_size"),
    )


class WorkspaceChecklistItem(CuidMixin, WorkspaceChildMixin, CreatedAtMixin, Base):
    """Checklist item. Table: workspace_checklist_item."""

    __tablename__ = "workspace_checklist_item"

    title: Mapped[str] = mapped_column(String, nullable=False)
    category: Mapped[str] = mapped_column(String, nullable=False, default="GERAL")
    checked: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    blocking: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_required: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    template_source: Mapped[str | None] = mapped_column(String, nullable=True)
    checked_by: Mapped[str | None] = mapped_column(String, nullable=True)
    checked_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )


class WorkspaceApproval(CuidMixin, WorkspaceChildMixin, Base):
    """Approval request (one round). Table: workspace_approval."""

    __tablename__ = "workspace_approval"

    round: Mapped[int] = mapped_column(Integer, nullable=False)
    approver_id: Mapped[str] = mapped_column(String, nullable=False)
    status: Mapped[str] = mapped_column(String, nullable=False, default="PENDING")
    requested_by: Mapped[str | None] = mapped_column(String, nullable=True)
    feedback: Mapped[str | None] = mapped_column(Text, nullable=True)
    corrections_required: Mapped[str | None] = mapped_column(Text, nullable=True)
    decided_by: Mapped[str | None] = mapped_column(String, nullable=True)
    decided_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    requested_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )

    __table_args__ = (
        UniqueConstraint("workspace_id", "round", name="uq_workspace_approval_round"),
        CheckConstraint(
            "status <> 'REJECTED' OR (feedback IS NOT NULL AND length(trim(feedback)) > 0)",
            name="ck_workspace_approval_rejection_feedback",
        ),
    )


class WorkspaceFilingRecord(CuidMixin, WorkspaceChildMixin, TimestampMixin, Base):
    """Filing record. Table: workspace_filing_record. At most one per workspace."""

    __tablename__ = "workspace_filing_record"

    system: Mapped[str | None] = mapped_column(String, nullable=True)
    number: Mapped[str | None] = mapped_column(String, nullable=True)
    filed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    receipt_url: Mapped[str | None] = mapped_column(String, nullable=True)
    registered_by: Mapped[str | None] = mapped_column(String, nullable=True)
    registered_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    __table_args__ = (
        UniqueConstraint("workspace_id", name="uq_workspace_filing_record_workspace"),
    )


class WorkspaceComment(CuidMixin, WorkspaceChildMixin, CreatedAtMixin, Base):
    """Comment or reply. Table: workspace_comment."""

    __tablename__ = "workspace_comment"

    content: Mapped[str] = mapped_column(Text, nullable=False)
    author_id: Mapped[str | None] = mapped_column(String, nullable=True)
    kind: Mapped[str] = mapped_column(String, nullable=False, default="GERAL")
    parent_id: Mapped[str | None] = mapped_column(
        String, ForeignKey("workspace_comment.id", ondelete="CASCADE"), nullable=True
    )
    resolved: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    resolved_by: Mapped[str | None] = mapped_column(String, nullable=True)
    resolved_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )


class WorkspaceThesis(CuidMixin, WorkspaceChildMixin, TimestampMixin, Base):
    """Legal thesis. Table: workspace_thesis."""

    __tablename__ = "workspace_thesis"

    title: Mapped[str] = mapped_column(String, nullable=False)
    kind: Mapped[str] = mapped_column(String, nullable=False, default="MERITO")
    status: Mapped[str] = mapped_column(String, nullable=False, default="RASCUNHO")
    issue: Mapped[str | None] = mapped_column(Text, nullable=True)
    rule: Mapped[str | None] = mapped_column(Text, nullable=True)
    analysis: Mapped[str | None] = mapped_column(Text, nullable=True)
    conclusion: Mapped[str | None] = mapped_column(Text, nullable=True)
    legal_refs: Mapped[list[str]] = mapped_column(JSONB, nullable=False, default=list)
    case_refs: Mapped[list[str]] = mapped_column(JSONB, nullable=False, default=list)
    doctrine_refs: Mapped[list[str]] = mapped_column(JSONB, nullable=False, default=list)
    strength: Mapped[str | None] = mapped_column(String, nullable=True)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_by: Mapped[str | None] = mapped_column(String, nullable=True)

    __table_args__ = (
        Index("ix_workspace_thesis_workspace_position", "workspace_id", "position"),
    )


class WorkspaceDraftVersion(CuidMixin, WorkspaceChildMixin, CreatedAtMixin, Base):
    """Saved snapshot of the draft content. Table: workspace_draft_version. Append-only."""

    __tablename__ = "workspace_draft_version"

    version_number: Mapped[int] = mapped_column(Integer, nullable=False)
    title: Mapped[str] = mapped_column(String, nullable=False)
    content_json: Mapped[Any | None] = mapped_column(JSONB, nullable=True)
    content_html: Mapped[str | None] = mapped_column(Text, nullable=True)
    word_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    change_summary: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_by: Mapped[str | None] = mapped_column(String, nullable=True)

    __table_args__ = (
        UniqueConstraint(
            "workspace_id", "version_number", name="uq_workspace_draft_version_number"
        ),
    )


class WorkspacePhaseTransition(CuidMixin, WorkspaceChildMixin, CreatedAtMixin, Base):
    """Phase change audit entry. Table: workspace_phase_transition. Append-only."""

    __tablename__ = "workspace_phase_transition"

    from_phase: Mapped[str] = mapped_column(String, nullable=False)
    to_phase: Mapped[str] = mapped_column(String, nullable=False)
    actor_id: Mapped[str | None] = mapped_column(String, nullable=True)
    reason: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        Index("ix_workspace_phase_transition_ws_created", "workspace_id", "created_at"),
    )


class WorkspaceActivity(CuidMixin, WorkspaceChildMixin, CreatedAtMixin, Base):
    """Activity log entry. Table: workspace_activity. Append-only."""

    __tablename__ = "workspace_activity"

    action: Mapped[str] = mapped_column(String, nullable=False, index=True)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    actor_id: Mapped[str | None] = mapped_column(String, nullable=True)
    metadata_: Mapped[dict[str, Any]] = mapped_column(
        "metadata", JSONB, nullable=False, default=dict
    )

    __table_args__ = (
        Index("ix_workspace_activity_ws_created", "workspace_id", "created_at"),
    )


@event.listens_for(WorkspacePhaseTransition, "before_update")
@event.listens_for(WorkspaceActivity, "before_update")
@event.listens_for(WorkspaceDraftVersion, "before_update")
def _prevent_history_updates(
    _mapper: Mapper[Any], _connection: Connection, target: Any
) -> None:
    """Transition, activity and draft version rows are append-only; updates are forbidden."""
    raise ValueError(f"{type(target).__name__} rows are immutable and cannot be updated.")


@event.listens_for(WorkspacePhaseTransition, "before_delete")
@event.listens_for(WorkspaceActivity, "before_delete")
@event.listens_for(WorkspaceDraftVersion, "before_delete")
def _prevent_history_deletes(
    _mapper: Mapper[Any], _connection: Connection, target: Any
) -> None:
    """Transition, activity and draft version rows are append-only; deletes are forbidden."""
    raise ValueError(f"{type(target).__name__} rows are immutable and cannot be deleted.")
