"""Add indexes for owner listing and calendar lookups

Revision ID: 002
Revises: 001
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
from sqlalchemy import text

revision: str = '002'
down_revision: Union[str, None] = '001'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    conn = op.get_bind()

    # Owner-scoped listing, newest first
    conn.execute(text("CREATE INDEX IF NOT EXISTS ix_todos_owner_created ON todos (owner_id, created_at)"))
    # Calendar day view
    conn.execute(text("CREATE INDEX IF NOT EXISTS ix_todos_scheduled_date ON todos (scheduled_date)"))


def downgrade() -> None:
    conn = op.get_bind()
    conn.execute(text("DROP INDEX IF EXISTS ix_todos_scheduled_date"))
    conn.execute(text("DROP INDEX IF EXISTS ix_todos_owner_created"))
