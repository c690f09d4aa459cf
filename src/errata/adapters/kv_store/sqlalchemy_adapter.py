"""SQLAlchemy-backed KeyValueStore adapter for ERRATA.

This module provides a durable implementation of the KeyValueStore interface on
top of the ``kv_store`` table (see adapters.kv_store.schema). The schema is
versioned with Alembic; run ``errata db upgrade`` before first use.

SQLAlchemy engines are blocking, so every operation runs its transaction in a
worker thread through `asyncio.to_thread`; the event loop only ever awaits.
Database errors and undecodable stored values are mapped to
`StoreUnavailableError`.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

from sqlalchemy import delete, insert, select, update
from sqlalchemy.exc import DBAPIError, StatementError

from errata.interfaces.kv_store import KeyValueStore, StoreUnavailableError

from .schema import kv_store

if TYPE_CHECKING:
    from sqlalchemy.engine import Connection, Engine


class SqlAlchemyKeyValueStore(KeyValueStore):
    """SQLAlchemy-backed KeyValueStore.

    - One row per key in the canonical ``kv_store`` table.
    - ``set`` overwrites by key (update, then insert when nothing matched).
    - Absence is reported as ``None``, never as an error.
    """

    def __init__(self, engine: Engine):
        self.engine = engine

    # --------------------------------------------------------------------- #
    # Interface implementation
    # --------------------------------------------------------------------- #

    async def get(self, key: str) -> Any | None:
        return await self._run(self._get, key)

    async def set(self, key: str, value: Any) -> None:
        await self._run(self._set, key, value)

    async def delete(self, key: str) -> None:
        await self._run(self._delete, key)

    # --------------------------------------------------------------------- #
    # Internals
    # --------------------------------------------------------------------- #

    async def _run(self, func, *args: Any) -> Any:
        try:
            return await asyncio.to_thread(func, *args)
        except (DBAPIError, StatementError) as e:
            raise StoreUnavailableError(str(e)) from e
        except ValueError as e:
            # JSON result processing decodes rows outside of SQLAlchemy's wrapping
            raise StoreUnavailableError(f"corrupt value in kv_store: {e}") from e

    def _get(self, key: str) -> Any | None:
        stmt = select(kv_store.c.value).where(kv_store.c.key == key)
        with self.engine.connect() as conn:
            return conn.execute(stmt).scalar_one_or_none()

    def _set(self, key: str, value: Any) -> None:
        now = datetime.now(timezone.utc)
        with self.engine.begin() as conn:
            if not self._update(conn, key, value, now):
                conn.execute(
                    insert(kv_store).values(key=key, value=value, updated_at=now)
                )

    @staticmethod
    def _update(conn: Connection, key: str, value: Any, now: datetime) -> bool:
        """Overwrite an existing row; return False when no row matched."""
        result = conn.execute(
            update(kv_store)
            .where(kv_store.c.key == key)
            .values(value=value, updated_at=now)
        )
        return result.rowcount > 0

    def _delete(self, key: str) -> None:
        with self.engine.begin() as conn:
            conn.execute(delete(kv_store).where(kv_store.c.key == key))
