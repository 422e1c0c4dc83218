"""Create journal_entry table

Revision ID: 001
Revises:
Create Date: 2026-10-18

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
        "journal_entry",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(length=256), nullable=True),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("mood", sa.String(length=64), nullable=False),
        sa.Column("category", sa.String(length=128), nullable=True),
        sa.Column("summary", sa.Text(), nullable=True),
        sa.Column("tags", sa.JSON(), nullable=False),
        sa.Column("color_hex", sa.String(length=16), nullable=True),
        sa.Column("audio_url", sa.String(length=1024), nullable=True),
        sa.Column("audio_duration", sa.Float(), nullable=True),
        sa.Column("emotional_tone", sa.String(length=128), nullable=True),
        sa.Column("sentiment_score", sa.Integer(), nullable=True),
        sa.Column("dominant_emotions", sa.JSON(), nullable=False),
        sa.Column("recommended_actions", sa.JSON(), nullable=False),
        sa.Column("mood_analysis", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_journal_entry_user_id"), "journal_entry", ["user_id"])


def downgrade() -> None:
    op.drop_index(op.f("ix_journal_entry_user_id"), table_name="journal_entry")
    op.drop_table("journal_entry")
