"""Create recording table

Revision ID: 001
Revises:
Create Date: 2026-10-17

"""

from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "recording",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=256), nullable=False),
        sa.Column("url", sa.String(length=1024), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_recording_name"), "recording", ["name"])
    op.create_index(op.f("ix_recording_created_at"), "recording", ["created_at"])


def downgrade() -> None:
    op.drop_index(op.f("ix_recording_created_at"), table_name="recording")
    op.drop_index(op.f("ix_recording_name"), table_name="recording")
    op.drop_table("recording")
