"""favorites table

Revision ID: a1f3c5e7b9d2
Revises:
Create Date: 2026-10-17

Adds favorites table (user_id, place_id, place_name, created_at), unique per
(user_id, place_id). user_id is the Supabase auth uid.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = "a1f3c5e7b9d2"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "favorites",
        sa.Column("id", sa.Uuid(as_uuid=True), nullable=False),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("place_id", sa.String(200), nullable=False),
        sa.Column("place_name", sa.String(200), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "place_id", name="uq_favorites_user_id_place_id"),
    )
    op.create_index(
        "ix_favorites_user_id",
        "favorites",
        ["user_id"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index("ix_favorites_user_id", table_name="favorites")
    op.drop_table("favorites")
