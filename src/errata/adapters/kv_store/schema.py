"""Key-value store schema.

Defines the ``kv_store`` table backing `SqlAlchemyKeyValueStore`. One row per
key; writes overwrite by key. The table is created by Alembic (see
``adapters/db/alembic/versions``).

| Column       | Purpose                                  |
|--------------|------------------------------------------|
| key          | natural key (primary key)                |
| value        | JSON-serialised value                    |
| updated_at   | UTC time of the last write               |
"""

from __future__ import annotations

from sqlalchemy import Column, String, Table

from errata.adapters.db.metadata import metadata
from errata.adapters.db.sa_types import JSON_VALUE, UTCDateTime

__all__ = ["kv_store"]

kv_store = Table(
    "kv_store",
    metadata,
    Column(
        "key",
        String(255),
        primary_key=True,
        nullable=False,
        comment="Natural key of the record.",
    ),
    Column(
        "value",
        JSON_VALUE,
        nullable=True,
        comment="JSON-serialised value.",
    ),
    Column(
        "updated_at",
        UTCDateTime(),
        nullable=False,
        comment="UTC time of the last write.",
    ),
    comment="Scoped key-value records (error catalog snapshot and friends).",
)
