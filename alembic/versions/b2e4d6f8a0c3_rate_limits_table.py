"""rate_limits table

Revision ID: b2e4d6f8a0c3
Revises: a1f3c5e7b9d2
Create Date: 2026-10-17

Adds rate_limits table: one fixed-window counter per (client_ip, function_name),
used by POST /why-this-place.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = "b2e4d6f8a0c3"
down_revision: Union[str, None] = "a1f3c5e7b9d2"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "rate_limits",
        sa.Column("client_ip", sa.String(64), nullable=False),
        sa.Column("function_name", sa.String(64), nullable=False),
        sa.Column("request_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("window_start", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("client_ip", "function_name", name="pk_rate_limits"),
    )


def downgrade() -> None:
    op.drop_table("rate_limits")
