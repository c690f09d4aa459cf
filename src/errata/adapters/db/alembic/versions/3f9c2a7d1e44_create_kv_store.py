"""Create kv_store table

Revision ID: 3f9c2a7d1e44
Revises:
Create Date: 2026-10-19

"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

from errata.adapters.db.sa_types import JSON_VALUE, UTCDateTime

# pylint: disable=no-member

# revision identifiers, used by Alembic.
revision: str = "3f9c2a7d1e44"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "kv_store",
        sa.Column(
            "key",
            sa.String(length=255),
            nullable=False,
            comment="Natural key of the record.",
        ),
        sa.Column(
            "value",
            JSON_VALUE,
            nullable=True,
            comment="JSON-serialised value.",
        ),
        sa.Column(
            "updated_at",
            UTCDateTime(),
            nullable=False,
            comment="UTC time of the last write.",
        ),
        sa.PrimaryKeyConstraint("key", name=op.f("pk_kv_store")),
        comment="Scoped key-value records (error catalog snapshot and friends).",
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table("kv_store")
