"""Create media relation and metadata cache tables.

Creates jw_preload_media_relations (which media IDs appear on which paths)
and jw_preload_metadata (one preloaded metadata document per media ID).

Revision ID: 001_create_preload_tables
Revises:
Create Date: 2026-10-18

"""

from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001_create_preload_tables"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create preload tables."""
    # ==========================================================================
    # jw_preload_media_relations - media ID <-> path, many-to-many
    # ==========================================================================
    op.create_table(
        "jw_preload_media_relations",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column("media_id", sa.String(64), nullable=False),
        sa.Column("path", sa.String(1024), nullable=False),
        sa.Column("entity_type", sa.String(128), nullable=True),
        sa.Column("entity_id", sa.BigInteger(), nullable=True),
        sa.Column("created", sa.BigInteger(), nullable=False),
        # A media ID is related to a path at most once
        sa.UniqueConstraint("media_id", "path", name="uq_jw_preload_media_relations_media_path"),
    )

    op.create_index("ix_jw_preload_media_relations_media_id", "jw_preload_media_relations", ["media_id"])
    op.create_index("ix_jw_preload_media_relations_path", "jw_preload_media_relations", ["path"])
    op.create_index(
        "ix_jw_preload_media_relations_entity",
        "jw_preload_media_relations",
        ["entity_type", "entity_id"],
    )

    # ==========================================================================
    # jw_preload_metadata - cached metadata documents
    # ==========================================================================
    op.create_table(
        "jw_preload_metadata",
        sa.Column("media_id", sa.String(64), primary_key=True),
        sa.Column("value", sa.Text(), nullable=False),
        sa.Column("created", sa.BigInteger(), nullable=False),
        sa.Column("updated", sa.BigInteger(), nullable=False),
    )


def downgrade() -> None:
    """Drop preload tables."""
    op.drop_table("jw_preload_metadata")

    op.drop_index("ix_jw_preload_media_relations_entity", table_name="jw_preload_media_relations")
    op.drop_index("ix_jw_preload_media_relations_path", table_name="jw_preload_media_relations")
    op.drop_index("ix_jw_preload_media_relations_media_id", table_name="jw_preload_media_relations")
    op.drop_table("jw_preload_media_relations")
