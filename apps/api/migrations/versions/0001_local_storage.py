"""local_storage key/value table

- Adds:
  - local_storage (one JSON blob per key; deep character sheet lives under
    "deep-character-sheet")
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

revision = "0001_local_storage"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "local_storage",
        sa.Column("key", sa.Text(), primary_key=True),
        sa.Column("value", sa.Text(), nullable=False),
        sa.Column("updated_at", sa.Text(), nullable=False),
    )


def downgrade() -> None:
    op.drop_table("local_storage")
