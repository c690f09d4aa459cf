"""Two-tier error catalog cache.

`CatalogCache` keeps the catalog in two in-memory indexes (by numeric code and
by error key) and mirrors it to a durable key-value store so a new process can
start warm. Freshness is bounded by a TTL applied to the catalog as a whole.

Convergence rules for `init_catalog`:

1. Cold and not forced: try the durable snapshot; accept it only while it is
   younger than the TTL (an expired one is deleted).
2. Populated, not expired, not forced: nothing to do.
3. A refresh is already running: await that same refresh (single-flight).
4. Otherwise fetch from the catalog source, repopulate both indexes in one
   synchronous step, and persist the snapshot in a detached background task.

Only fetch errors propagate, and only to the awaiters of the refresh that
failed; the indexes are left exactly as they were. Storage errors are logged
and absorbed.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Coroutine, Iterable
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Any

from errata.config import CACHE_TTL
from errata.domain.catalog import CatalogEntry, CatalogSnapshot
from errata.domain.errors import InvalidSnapshotError
from errata.interfaces.kv_store import KeyValueStoreError

if TYPE_CHECKING:
    from errata.interfaces.catalog_source import CatalogSource
    from errata.interfaces.clock import Clock
    from errata.interfaces.kv_store import KeyValueStore

logger = logging.getLogger(__name__)

ENTRIES_KEY = "error-catalog:entries"  # pragma: no mutate
TIMESTAMP_KEY = "error-catalog:timestamp"  # pragma: no mutate

BackgroundErrorHandler = Callable[[BaseException], None]


class CatalogCache:
    """In-memory + durable cache of the error catalog.

    Args:
        source: Where fresh catalogs come from.
        store: Durable store for the persisted snapshot.
        clock: Time source used for TTL decisions.
        ttl: Maximum snapshot age.
        on_background_error: Optional callback receiving exceptions raised by
            background persistence tasks (they are always logged as well).
    """

    def __init__(  # pylint: disable=too-many-arguments
        self,
        source: CatalogSource,
        store: KeyValueStore,
        clock: Clock,
        *,
        ttl: timedelta = CACHE_TTL,
        on_background_error: BackgroundErrorHandler | None = None,
    ) -> None:
        self.source = source
        self.store = store
        self.clock = clock
        self.ttl = ttl
        self._on_background_error = on_background_error

        self._by_code: dict[int, CatalogEntry] = {}
        self._by_key: dict[str, CatalogEntry] = {}
        self._indexed: tuple[CatalogEntry, ...] = ()
        self._timestamp: datetime | None = None
        self._inflight: asyncio.Task[None] | None = None
        # set by clear_cache until the next population; the durable delete
        # runs in the background and must not be raced by a re-hydration
        self._snapshot_discarded = False
        self._background: set[asyncio.Task[Any]] = set()

    # --------------------------------------------------------------------- #
    # Public operations
    # --------------------------------------------------------------------- #

    async def init_catalog(self, force_refresh: bool = False) -> None:
        """Bring the cache to a fresh state, fetching only when needed.

        Args:
            force_refresh: Skip the durable snapshot and the freshness check
                and refresh from the source (joining a running refresh if any).

        Raises:
            CatalogSourceError: If the refresh this call started or joined failed.
        """
        if not force_refresh:
            if self._needs_hydration() and await self._hydrate():
                return
            if not self.is_expired():
                return

        if self._inflight is None:
            self._inflight = asyncio.create_task(self._refresh())
        else:
            logger.debug("Joining in-flight error catalog refresh")

        # shield: a cancelled awaiter must not cancel the refresh others share
        await asyncio.shield(self._inflight)

    def is_initialized(self) -> bool:
        """True iff the by-code index holds at least one entry."""
        return len(self._by_code) > 0

    def is_expired(self) -> bool:
        """True if the catalog was never populated or is older than the TTL."""
        return self._timestamp is None or self._is_stale(self._timestamp)

    def clear_cache(self) -> None:
        """Empty both indexes and the timestamp; delete the durable snapshot.

        The in-memory reset is immediate. The durable delete runs as a
        background task when an event loop is running and is skipped otherwise.
        """
        self._by_code = {}
        self._by_key = {}
        self._indexed = ()
        self._timestamp = None
        self._snapshot_discarded = True
        logger.info("Error catalog cache cleared")

        try:
            asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running event loop; durable snapshot left in place")
            return
        self._spawn(self._delete_snapshot())

    def by_code(self, code: int) -> CatalogEntry | None:
        """Look up an entry by numeric code (no I/O, no initialization)."""
        return self._by_code.get(code)

    def by_key(self, key: str) -> CatalogEntry | None:
        """Look up an entry by error key (no I/O, no initialization)."""
        return self._by_key.get(key)

    def entries(self) -> list[CatalogEntry]:
        """Return the entries reachable from an index, in catalog order.

        An entry whose code and key were both taken over by later duplicates
        is left out.
        """
        return [
            entry
            for entry in self._indexed
            if (entry.code is not None and self._by_code.get(entry.code) is entry)
            or (entry.error_key is not None and self._by_key.get(entry.error_key) is entry)
        ]

    @property
    def timestamp(self) -> datetime | None:
        """When the indexes were last populated, or None."""
        return self._timestamp

    async def drain(self) -> None:
        """Wait for all pending background tasks (persistence, deletes)."""
        while self._background:
            await asyncio.gather(*list(self._background), return_exceptions=True)

    # --------------------------------------------------------------------- #
    # Internals
    # --------------------------------------------------------------------- #

    def _is_stale(self, taken_at: datetime) -> bool:
        return self.clock.now() - taken_at >= self.ttl

    def _needs_hydration(self) -> bool:
        return self._timestamp is None and not self._snapshot_discarded

    def _populate(self, entries: Iterable[CatalogEntry], taken_at: datetime) -> None:
        """Rebuild both indexes and the timestamp in one synchronous step."""
        by_code: dict[int, CatalogEntry] = {}
        by_key: dict[str, CatalogEntry] = {}
        indexed: list[CatalogEntry] = []
        for entry in entries:
            if not entry.message:
                continue
            indexed.append(entry)
            if entry.code is not None:
                by_code[entry.code] = entry
            if entry.error_key is not None:
                by_key[entry.error_key] = entry

        self._by_code = by_code
        self._by_key = by_key
        self._indexed = tuple(indexed)
        self._timestamp = taken_at
        self._snapshot_discarded = False

    async def _refresh(self) -> None:
        try:
            entries = await self.source.fetch_entries()
        except Exception as e:
            logger.warning("Error catalog refresh failed: %s", e)
            raise
        else:
            snapshot = CatalogSnapshot.of(entries, self.clock.now())
            self._populate(snapshot.entries, snapshot.taken_at)
            logger.info(
                "Error catalog refreshed: %d by code, %d by key",
                len(self._by_code),
                len(self._by_key),
            )
            self._spawn(self._persist(snapshot))
        finally:
            self._inflight = None

    async def _hydrate(self) -> bool:
        """Populate from the durable snapshot; return True if it was accepted."""
        try:
            timestamp = await self.store.get(TIMESTAMP_KEY)
            if timestamp is None:
                return False
            snapshot = CatalogSnapshot.from_records(
                await self.store.get(ENTRIES_KEY), timestamp
            )
        except KeyValueStoreError as e:
            logger.warning("Could not read persisted error catalog: %s", e)
            return False
        except InvalidSnapshotError as e:
            logger.warning("Discarding persisted error catalog: %s", e)
            await self._delete_snapshot_quietly()
            return False

        if self._is_stale(snapshot.taken_at):
            logger.info("Persisted error catalog expired; discarding it")
            await self._delete_snapshot_quietly()
            return False

        # a refresh may have landed while the store was being read
        if self._timestamp is None or self._timestamp < snapshot.taken_at:
            self._populate(snapshot.entries, snapshot.taken_at)
            logger.debug(
                "Error catalog restored from durable store (%d entries)",
                len(snapshot.entries),
            )
        return True

    async def _persist(self, snapshot: CatalogSnapshot) -> None:
        # list first, timestamp last: the timestamp marks the snapshot complete
        await self.store.set(ENTRIES_KEY, snapshot.entry_records())
        await self.store.set(TIMESTAMP_KEY, snapshot.timestamp_record())

    async def _delete_snapshot(self) -> None:
        # timestamp first, so a failed second delete leaves no live snapshot
        await self.store.delete(TIMESTAMP_KEY)
        await self.store.delete(ENTRIES_KEY)

    async def _delete_snapshot_quietly(self) -> None:
        try:
            await self._delete_snapshot()
        except KeyValueStoreError as e:
            logger.warning("Could not delete persisted error catalog: %s", e)

    def _spawn(self, coro: Coroutine[Any, Any, None]) -> None:
        task = asyncio.create_task(coro)
        self._background.add(task)
        task.add_done_callback(self._on_background_done)

    def _on_background_done(self, task: asyncio.Task[Any]) -> None:
        self._background.discard(task)
        if task.cancelled() or (exc := task.exception()) is None:
            return
        logger.warning("Error catalog background task failed: %s", exc)
        if self._on_background_error is not None:
            self._on_background_error(exc)
