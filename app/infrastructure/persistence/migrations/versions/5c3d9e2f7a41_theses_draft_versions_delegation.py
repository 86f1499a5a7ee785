"""theses_draft_versions_delegation

Revision ID: 5c3d9e2f7a41
Revises: 2b7e1c9d4a10
Create Date: 2026-10-18 15:00:00.000000

"""

from collections.abc import Sequence
from typing import Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "5c3d9e2f7a41"
down_revision: Union[str, Sequence[str], None] = "2b7e1c9d4a10"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _created_at() -> sa.Column:
    return sa.Column(
        "created_at",
        sa.DateTime(timezone=True),
        server_default=sa.text("now()"),
        nullable=False,
    )


def _workspace_fk() -> sa.Column:
    return sa.Column(
        "workspace_id",
        sa.String(),
        sa.ForeignKey("workspace.id", ondelete="CASCADE"),
        nullable=False,
    )


def _refs(name: str) -> sa.Column:
    return sa.Column(
        name,
        postgresql.JSONB(astext_type=sa.Text()),
        nullable=False,
        server_default=sa.text("'[]'::jsonb"),
    )


def upgrade() -> None:
    """Upgrade schema."""
    op.add_column("workspace", sa.Column("responsible_id", sa.String(), nullable=True))
    op.add_column(
        "workspace",
        sa.Column("content_json", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
    )
    op.add_column("workspace", sa.Column("content_html", sa.Text(), nullable=True))
    op.add_column(
        "workspace",
        sa.Column("content_saved_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.add_column("workspace", sa.Column("content_saved_by", sa.String(), nullable=True))
    op.add_column(
        "workspace",
        sa.Column("word_count", sa.Integer(), nullable=False, server_default="0"),
    )
    op.add_column(
        "workspace",
        sa.Column("char_count", sa.Integer(), nullable=False, server_default="0"),
    )
    op.create_index("ix_workspace_responsible_id", "workspace", ["responsible_id"])

    op.create_table(
        "workspace_thesis",
        sa.Column("id", sa.String(), primary_key=True),
        _workspace_fk(),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("kind", sa.String(), nullable=False, server_default="MERITO"),
        sa.Column("status", sa.String(), nullable=False, server_default="RASCUNHO"),
        sa.Column("issue", sa.Text(), nullable=True),
        sa.Column("rule", sa.Text(), nullable=True),
        sa.Column("analysis", sa.Text(), nullable=True),
        sa.Column("conclusion", sa.Text(), nullable=True),
        _refs("legal_refs"),
        _refs("case_refs"),
        _refs("doctrine_refs"),
        sa.Column("strength", sa.String(), nullable=True),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_by", sa.String(), nullable=True),
        _created_at(),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
    )
    op.create_index(
        "ix_workspace_thesis_workspace_id", "workspace_thesis", ["workspace_id"]
    )
    op.create_index(
        "ix_workspace_thesis_workspace_position",
        "workspace_thesis",
        ["workspace_id", "position"],
    )

    op.create_table(
        "workspace_draft_version",
        sa.Column("id", sa.String(), primary_key=True),
        _workspace_fk(),
        sa.Column("version_number", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column(
            "content_json", postgresql.JSONB(astext_type=sa.Text()), nullable=True
        ),
        sa.Column("content_html", sa.Text(), nullable=True),
        sa.Column("word_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("change_summary", sa.Text(), nullable=True),
        sa.Column("created_by", sa.String(), nullable=True),
        _created_at(),
        sa.UniqueConstraint(
            "workspace_id", "version_number", name="uq_workspace_draft_version_number"
        ),
    )
    op.create_index(
        "ix_workspace_draft_version_workspace_id",
        "workspace_draft_version",
        ["workspace_id"],
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table("workspace_draft_version")
    op.drop_table("workspace_thesis")
    op.drop_index("ix_workspace_responsible_id", table_name="workspace")
    for column in (
        "char_count",
        "word_count",
        "content_saved_by",
        "content_saved_at",
        "content_html",
        "content_json",
        "responsible_id",
    ):
        op.drop_column("workspace", column)
