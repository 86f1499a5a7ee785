"""initial_workspace_schema

Revision ID: 2b7e1c9d4a10
Revises:
Create Date: 2026-10-18 09:00:00.000000

"""

from collections.abc import Sequence
from typing import Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "2b7e1c9d4a10"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps(*, updated: bool = True) -> list[sa.Column]:
    cols = [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        )
    ]
    if updated:
        cols.append(
            sa.Column(
                "updated_at",
                sa.DateTime(timezone=True),
                server_default=sa.text("now()"),
                nullable=False,
            )
        )
    return cols


def _workspace_fk() -> sa.Column:
    return sa.Column(
        "workspace_id",
        sa.String(),
        sa.ForeignKey("workspace.id", ondelete="CASCADE"),
        nullable=False,
    )


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "workspace",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("deadline_id", sa.String(), nullable=False),
        sa.Column("deadline_type", sa.String(), nullable=True),
        sa.Column("phase", sa.String(), nullable=False),
        sa.Column("locked", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("locked_by", sa.String(), nullable=True),
        sa.Column("locked_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("principal_document_id", sa.String(), nullable=True),
        sa.Column("phase_changed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("phase_changed_by", sa.String(), nullable=True),
        sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
        *_timestamps(),
        sa.UniqueConstraint("deadline_id", name="uq_workspace_deadline_id"),
        sa.CheckConstraint(
            "phase IN ('DRAFT', 'REVIEW', 'APPROVAL', 'FILING', 'CLOSED')",
            name="ck_workspace_phase",
        ),
    )
    op.create_index("ix_workspace_phase", "workspace", ["phase"])

    op.create_table(
        "workspace_document",
        sa.Column("id", sa.String(), primary_key=True),
        _workspace_fk(),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("origin_phase", sa.String(), nullable=False),
        sa.Column("storage_url", sa.String(), nullable=True),
        sa.Column("file_name", sa.String(), nullable=True),
        sa.Column("file_size", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("mime_type", sa.String(), nullable=True),
        sa.Column("category", sa.String(), nullable=False, server_default="ANEXO"),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("is_principal", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_superseded", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column(
            "replaces_document_id",
            sa.String(),
            sa.ForeignKey("workspace_document.id"),
            nullable=True,
        ),
        sa.Column("is_validated", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("validated_by", sa.String(), nullable=True),
        sa.Column("validated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("uploaded_by", sa.String(), nullable=True),
        sa.Column("removed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("removed_by", sa.String(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("file_size >= 0", name="ck_workspace_document_file_size"),
    )
    op.create_index(
        "ix_workspace_document_workspace_id", "workspace_document", ["workspace_id"]
    )
    op.create_index(
        "ix_workspace_document_workspace_created",
        "workspace_document",
        ["workspace_id", "created_at"],
    )
    op.create_index(
        "uq_workspace_document_current_principal",
        "workspace_document",
        ["workspace_id"],
        unique=True,
        postgresql_where=sa.text(
            "is_principal AND NOT is_superseded AND removed_at IS NULL"
        ),
    )

    op.create_table(
        "workspace_checklist_item",
        sa.Column("id", sa.String(), primary_key=True),
        _workspace_fk(),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("category", sa.String(), nullable=False, server_default="GERAL"),
        sa.Column("checked", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("blocking", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_required", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("template_source", sa.String(), nullable=True),
        sa.Column("checked_by", sa.String(), nullable=True),
        sa.Column("checked_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(updated=False),
    )
    op.create_index(
        "ix_workspace_checklist_item_workspace_id",
        "workspace_checklist_item",
        ["workspace_id"],
    )

    op.create_table(
        "workspace_approval",
        sa.Column("id", sa.String(), primary_key=True),
        _workspace_fk(),
        sa.Column("round", sa.Integer(), nullable=False),
        sa.Column("approver_id", sa.String(), nullable=False),
        sa.Column("status", sa.String(), nullable=False, server_default="PENDING"),
        sa.Column("requested_by", sa.String(), nullable=True),
        sa.Column("feedback", sa.Text(), nullable=True),
        sa.Column("corrections_required", sa.Text(), nullable=True),
        sa.Column("decided_by", sa.String(), nullable=True),
        sa.Column("decided_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("requested_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("workspace_id", "round", name="uq_workspace_approval_round"),
        sa.CheckConstraint(
            "status <> 'REJECTED' OR (feedback IS NOT NULL AND length(trim(feedback)) > 0)",
            name="ck_workspace_approval_rejection_feedback",
        ),
    )
    op.create_index(
        "ix_workspace_approval_workspace_id", "workspace_approval", ["workspace_id"]
    )

    op.create_table(
        "workspace_filing_record",
        sa.Column("id", sa.String(), primary_key=True),
        _workspace_fk(),
        sa.Column("system", sa.String(), nullable=True),
        sa.Column("number", sa.String(), nullable=True),
        sa.Column("filed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("receipt_url", sa.String(), nullable=True),
        sa.Column("registered_by", sa.String(), nullable=True),
        sa.Column("registered_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint(
            "workspace_id", name="uq_workspace_filing_record_workspace"
        ),
    )
    op.create_index(
        "ix_workspace_filing_record_workspace_id",
        "workspace_filing_record",
        ["workspace_id"],
    )

    op.create_table(
        "workspace_comment",
        sa.Column("id", sa.String(), primary_key=True),
        _workspace_fk(),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("author_id", sa.String(), nullable=True),
        sa.Column("kind", sa.String(), nullable=False, server_default="GERAL"),
        sa.Column(
            "parent_id",
            sa.String(),
            sa.ForeignKey("workspace_comment.id", ondelete="CASCADE"),
            nullable=True,
        ),
        sa.Column("resolved", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("resolved_by", sa.String(), nullable=True),
        sa.Column("resolved_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(updated=False),
    )
    op.create_index(
        "ix_workspace_comment_workspace_id", "workspace_comment", ["workspace_id"]
    )

    op.create_table(
        "workspace_phase_transition",
        sa.Column("id", sa.String(), primary_key=True),
        _workspace_fk(),
        sa.Column("from_phase", sa.String(), nullable=False),
        sa.Column("to_phase", sa.String(), nullable=False),
        sa.Column("actor_id", sa.String(), nullable=True),
        sa.Column("reason", sa.Text(), nullable=True),
        *_timestamps(updated=False),
    )
    op.create_index(
        "ix_workspace_phase_transition_workspace_id",
        "workspace_phase_transition",
        ["workspace_id"],
    )
    op.create_index(
        "ix_workspace_phase_transition_ws_created",
        "workspace_phase_transition",
        ["workspace_id", "created_at"],
    )

    op.create_table(
        "workspace_activity",
        sa.Column("id", sa.String(), primary_key=True),
        _workspace_fk(),
        sa.Column("action", sa.String(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("actor_id", sa.String(), nullable=True),
        sa.Column(
            "metadata",
            postgresql.JSONB(astext_type=sa.Text()),
            nullable=False,
            server_default=sa.text("'{}'::jsonb"),
        ),
        *_timestamps(updated=False),
    )
    op.create_index(
        "ix_workspace_activity_workspace_id", "workspace_activity", ["workspace_id"]
    )
    op.create_index("ix_workspace_activity_action", "workspace_activity", ["action"])
    op.create_index(
        "ix_workspace_activity_ws_created",
        "workspace_activity",
        ["workspace_id", "created_at"],
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table("workspace_activity")
    op.drop_table("workspace_phase_transition")
    op.drop_table("workspace_comment")
    op.drop_table("workspace_filing_record")
    op.drop_table("workspace_approval")
    op.drop_table("workspace_checklist_item")
    op.drop_table("workspace_document")
    op.drop_table("workspace")
