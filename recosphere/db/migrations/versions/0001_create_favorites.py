"""create favorites table

Revision ID: 0001
Revises:
Create Date: 2026-10-17 09:00:00.000000
"""

from __future__ import annotations

from typing import Sequence

from alembic import op
import sqlalchemy as sa

revision: str = "0001"
down_revision: str | None = None
branch_labels: Sequence[str] | None = None
depends_on: Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "favorites",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.String(length=128), nullable=False),
        sa.Column("external_id", sa.String(length=64), nullable=False),
        sa.Column("media_type", sa.String(length=8), nullable=False),
        sa.Column(
            "added_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column(
            "tags",
            sa.JSON(),
            nullable=False,
            server_default=sa.text("'[]'"),
        ),
        sa.UniqueConstraint(
            "user_id",
            "external_id",
            name="uq_favorites_user_external",
        ),
    )

    op.create_index("ix_favorites_user_id", "favorites", ["user_id"])
    # Listing reads one user's rows in insertion order.
    op.create_index("ix_favorites_user_id_id", "favorites", ["user_id", "id"])


def downgrade() -> None:
    op.drop_index("ix_favorites_user_id_id", table_name="favorites")
    op.drop_index("ix_favorites_user_id", table_name="favorites")
    op.drop_table("favorites")
