"""Column types shared by the durable store tables.

``JSON_VALUE`` holds arbitrary JSON documents (JSONB on PostgreSQL), and
``UTCDateTime`` keeps write times as aware UTC datetimes on every backend.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

from sqlalchemy import JSON
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.types import DateTime, TypeDecorator

if TYPE_CHECKING:
    from sqlalchemy.engine.interfaces import Dialect

__all__ = ["JSON_VALUE", "UTCDateTime"]

# Python None is written as SQL NULL rather than the JSON literal null
JSON_VALUE = JSON(none_as_null=True).with_variant(JSONB(none_as_null=True), "postgresql")


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class UTCDateTime(TypeDecorator[datetime]):  # pylint: disable=too-many-ancestors
    """``DateTime`` that only ever hands out aware UTC values.

    Naive inputs are read as UTC. SQLite has no zone support, so values are
    written there as naive UTC wall time and re-tagged on the way out.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> Any:
        if value is None:
            return None
        utc = _as_utc(value)
        return utc.replace(tzinfo=None) if dialect.name == "sqlite" else utc

    def process_literal_param(self, value: datetime | None, dialect: Dialect) -> Any:
        return self.process_bind_param(value, dialect)

    def process_result_value(self, value: Any, dialect: Dialect) -> datetime | None:
        return _as_utc(value) if isinstance(value, datetime) else value

    @property
    def python_type(self) -> type[datetime]:
        return datetime
