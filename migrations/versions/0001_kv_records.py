"""create kv_records table

Revision ID: 0001
Revises:
Create Date: 2026-10-18

Single bucketed key/value table holding the Days, Streak and Config buckets.
Unique constraint (bucket, key) makes every key a singleton within its bucket.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "kv_records",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("bucket", sa.String(32), nullable=False),
        sa.Column("key", sa.String(64), nullable=False),
        sa.Column("value", sa.LargeBinary(), nullable=False),
        sa.UniqueConstraint("bucket", "key", name="uq_kv_bucket_key"),
    )
    op.create_index("ix_kv_records_id", "kv_records", ["id"])
    op.create_index("ix_kv_records_bucket", "kv_records", ["bucket"])


def downgrade() -> None:
    op.drop_index("ix_kv_records_bucket", table_name="kv_records")
    op.drop_index("ix_kv_records_id", table_name="kv_records")
    op.drop_table("kv_records")
