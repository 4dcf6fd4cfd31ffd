"""Add maintenance comments

Revision ID: 20260301_000002
Revises: 20260201_000001
Create Date: 2026-03-01

Discussion thread on maintenance requests. Internal comments are hidden
from tenants.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = "20260301_000002"
down_revision: Union[str, None] = "20260201_000001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "maintenance_comments",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("maintenance_id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("comment", sa.Text(), nullable=False),
        sa.Column("is_internal", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(
            ["maintenance_id"],
            ["maintenance_requests.id"],
            name="fk_maintenance_comments_maintenance_id",
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], name="fk_maintenance_comments_user_id"),
    )
    op.create_index("ix_maintenance_comments_maintenance_id", "maintenance_comments", ["maintenance_id"])
    op.create_index("ix_maintenance_comments_user_id", "maintenance_comments", ["user_id"])


def downgrade() -> None:
    op.drop_index("ix_maintenance_comments_user_id", table_name="maintenance_comments")
    op.drop_index("ix_maintenance_comments_maintenance_id", table_name="maintenance_comments")
    op.drop_table("maintenance_comments")
