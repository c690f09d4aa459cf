"""Unit tests for `errata.service_layer.catalog_cache.CatalogCache`.

The cache is driven with a fake clock, a fake catalog source and an in-memory
durable store, so TTL and persistence behavior are deterministic.
"""

from __future__ import annotations

from datetime import timedelta

import pytest

from errata.adapters.kv_store import InMemoryKeyValueStore
from errata.domain.catalog import CatalogSnapshot
from errata.interfaces.catalog_source import CatalogFetchError, CatalogTimeoutError
from errata.service_layer.catalog_cache import ENTRIES_KEY, TIMESTAMP_KEY, CatalogCache
from tests.unit.fakes import FakeClock, FakeSource, FlakyStore, entry, failing_fetch

# pylint: disable=redefined-outer-name
# pylint: disable=protected-access

TTL = timedelta(hours=24)

CATALOG = [
    entry(100, "A_KEY", "A"),
    entry(None, "K", "B"),
    entry(200, None, "C"),
    entry(300, "NO_MESSAGE", None),
    entry(None, None, "orphan"),
]


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def source() -> FakeSource:
    return FakeSource(CATALOG)


@pytest.fixture
def store() -> FlakyStore:
    return FlakyStore()


@pytest.fixture
def cache(source, store, clock) -> CatalogCache:
    return CatalogCache(source, store, clock, ttl=TTL)


async def persist_snapshot(store, entries, taken_at) -> None:
    snapshot = CatalogSnapshot.of(entries, taken_at)
    await store.set(ENTRIES_KEY, snapshot.entry_records())
    await store.set(TIMESTAMP_KEY, snapshot.timestamp_record())


class TestInitCatalog:
    """Convergence of `init_catalog` from cold, fresh and stale states."""

    @pytest.mark.asyncio
    async def test_cold_start_fetches_once(self, cache, source):
        """A cold cache with an empty durable store fetches from the source."""
        await cache.init_catalog()

        assert source.calls == 1
        assert cache.is_initialized()
        assert cache.by_code(100).message == "A"
        assert cache.by_key("K").message == "B"

    @pytest.mark.asyncio
    async def test_second_call_on_fresh_cache_is_a_no_op(self, cache, source, clock):
        """Two successive calls within the TTL perform exactly one fetch."""
        await cache.init_catalog()
        clock.advance(timedelta(hours=23))
        await cache.init_catalog()

        assert source.calls == 1

    @pytest.mark.asyncio
    async def test_force_refresh_always_fetches(self, cache, source):
        """``force_refresh`` bypasses the freshness check."""
        await cache.init_catalog()
        await cache.init_catalog(force_refresh=True)

        assert source.calls == 2

    @pytest.mark.asyncio
    async def test_expired_cache_refetches(self, cache, source, clock):
        """At T+24h+1s the in-memory catalog is stale and is refetched."""
        await cache.init_catalog()
        source.entries = [entry(100, "A_KEY", "A2")]
        clock.advance(TTL + timedelta(seconds=1))

        assert cache.is_expired()
        await cache.init_catalog()

        assert source.calls == 2
        assert cache.by_code(100).message == "A2"

    @pytest.mark.asyncio
    async def test_expiry_boundary_is_inclusive(self, cache, clock):
        """A catalog exactly one TTL old counts as expired."""
        await cache.init_catalog()
        clock.advance(TTL - timedelta(microseconds=1))
        assert not cache.is_expired()
        clock.advance(timedelta(microseconds=1))
        assert cache.is_expired()

    @pytest.mark.asyncio
    async def test_empty_catalog_is_fresh(self, store, clock):
        """An empty fetched catalog is a valid state and is not refetched."""
        source = FakeSource([])
        cache = CatalogCache(source, store, clock, ttl=TTL)

        await cache.init_catalog()
        await cache.init_catalog()

        assert source.calls == 1
        assert not cache.is_initialized()
        assert not cache.is_expired()


class TestPopulation:
    """Index contents after a refresh."""

    @pytest.mark.asyncio
    async def test_code_and_key_indexes_agree(self, cache):
        """For entries with both a code and a key, both lookups give the same entry."""
        await cache.init_catalog()

        for item in cache.entries():
            if item.code is not None and item.error_key is not None:
                assert cache.by_code(item.code) is cache.by_key(item.error_key)

    @pytest.mark.asyncio
    async def test_entries_without_message_are_not_indexed(self, cache):
        """Entries lacking a message never reach the indexes."""
        await cache.init_catalog()

        assert cache.by_code(300) is None
        assert cache.by_key("NO_MESSAGE") is None

    @pytest.mark.asyncio
    async def test_entries_lists_each_indexed_entry_once(self, cache):
        """`entries` lists every indexed entry once, in catalog order."""
        await cache.init_catalog()

        assert [item.message for item in cache.entries()] == ["A", "B", "C"]

    @pytest.mark.asyncio
    async def test_entries_keep_catalog_order_over_index_order(self, store, clock):
        """A key-only entry listed first stays first; fully shadowed duplicates drop out."""
        source = FakeSource(
            [
                entry(None, "K", "key only"),
                entry(1, None, "first"),
                entry(2, "J", "both"),
                entry(1, None, "second"),
            ]
        )
        cache = CatalogCache(source, store, clock, ttl=TTL)

        await cache.init_catalog()

        assert [item.message for item in cache.entries()] == ["key only", "both", "second"]

    @pytest.mark.asyncio
    async def test_last_duplicate_code_wins(self, store, clock):
        """Duplicate codes resolve to the last entry in catalog order."""
        source = FakeSource([entry(1, None, "first"), entry(1, None, "second")])
        cache = CatalogCache(source, store, clock, ttl=TTL)

        await cache.init_catalog()

        assert cache.by_code(1).message == "second"

    @pytest.mark.asyncio
    async def test_refresh_replaces_both_indexes(self, cache, source):
        """A refresh drops entries that vanished from the catalog."""
        await cache.init_catalog()
        source.entries = [entry(100, None, "only")]

        await cache.init_catalog(force_refresh=True)

        assert cache.by_code(100).message == "only"
        assert cache.by_key("K") is None
        assert cache.by_code(200) is None


class TestFetchFailure:
    """A failed refresh propagates its error and leaves state untouched."""

    @pytest.mark.asyncio
    async def test_failure_on_cold_cache_propagates(self, cache, source):
        """The fetch error reaches the caller and the cache stays empty."""
        source.error = CatalogTimeoutError("http://test", 10.0)

        with pytest.raises(CatalogTimeoutError):
            await cache.init_catalog()

        assert not cache.is_initialized()
        assert cache.timestamp is None

    @pytest.mark.asyncio
    async def test_failure_keeps_previous_catalog(self, cache, source, clock):
        """A failed refresh of a stale catalog keeps the previous entries."""
        await cache.init_catalog()
        previous = cache.timestamp
        clock.advance(TTL * 2)
        source.error = failing_fetch(503)

        with pytest.raises(CatalogFetchError) as exc_info:
            await cache.init_catalog()

        assert exc_info.value.status_code == 503
        assert cache.by_code(100).message == "A"
        assert cache.timestamp == previous

    @pytest.mark.asyncio
    async def test_next_call_retries_after_failure(self, cache, source):
        """The in-flight marker is cleared so a later call can retry."""
        source.error = failing_fetch()
        with pytest.raises(CatalogFetchError):
            await cache.init_catalog()

        source.error = None
        await cache.init_catalog()

        assert source.calls == 2
        assert cache._inflight is None
        assert cache.is_initialized()


class TestDurableSnapshot:
    """Hydration from and persistence to the durable store."""

    @pytest.mark.asyncio
    async def test_refresh_persists_snapshot(self, cache, store, clock):
        """The fetched catalog is written in the background, timestamp last."""
        await cache.init_catalog()
        await cache.drain()

        assert store.writes == [ENTRIES_KEY, TIMESTAMP_KEY]
        assert await store.get(TIMESTAMP_KEY) == clock.now().timestamp()
        assert {"code": 100, "errorKey": "A_KEY", "message": "A", "locale": "fa-IR"} in (
            await store.get(ENTRIES_KEY)
        )

    @pytest.mark.asyncio
    async def test_fresh_snapshot_is_used_without_fetching(self, source, store, clock):
        """A new process with a one-hour-old snapshot needs no network call."""
        await persist_snapshot(
            store, [entry(9, None, "C")], clock.now() - timedelta(hours=1)
        )
        cache = CatalogCache(source, store, clock, ttl=TTL)

        await cache.init_catalog()

        assert source.calls == 0
        assert cache.by_code(9).message == "C"
        assert cache.timestamp == clock.now() - timedelta(hours=1)

    @pytest.mark.asyncio
    async def test_hydrated_catalog_expires_on_snapshot_age(self, source, store, clock):
        """The TTL of a hydrated catalog counts from when it was fetched."""
        await persist_snapshot(
            store, [entry(9, None, "C")], clock.now() - timedelta(hours=20)
        )
        cache = CatalogCache(source, store, clock, ttl=TTL)
        await cache.init_catalog()
        clock.advance(timedelta(hours=5))

        await cache.init_catalog()

        assert source.calls == 1

    @pytest.mark.asyncio
    async def test_expired_snapshot_is_deleted_and_refetched(self, source, store, clock):
        """A snapshot older than the TTL is discarded in favor of the network."""
        await persist_snapshot(
            store, [entry(9, None, "old")], clock.now() - TTL - timedelta(seconds=1)
        )
        cache = CatalogCache(source, store, clock, ttl=TTL)

        await cache.init_catalog()

        assert source.calls == 1
        assert cache.by_code(9) is None
        assert TIMESTAMP_KEY in store.deletes

    @pytest.mark.asyncio
    async def test_orphaned_entries_without_timestamp_are_ignored(self, source, store, clock):
        """An entry list with no timestamp record is not a snapshot."""
        await store.set(ENTRIES_KEY, [{"code": 9, "message": "orphan"}])
        cache = CatalogCache(source, store, clock, ttl=TTL)

        await cache.init_catalog()

        assert source.calls == 1
        assert cache.by_code(9) is None

    @pytest.mark.asyncio
    async def test_malformed_snapshot_is_discarded(self, source, store, clock):
        """A snapshot with a non-numeric timestamp is deleted and refetched."""
        await store.set(ENTRIES_KEY, [])
        await store.set(TIMESTAMP_KEY, "yesterday")
        cache = CatalogCache(source, store, clock, ttl=TTL)

        await cache.init_catalog()

        assert source.calls == 1
        assert store.deletes == [TIMESTAMP_KEY, ENTRIES_KEY]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("timestamp", [1e20, float("inf"), float("nan")])
    async def test_unrepresentable_timestamp_is_discarded(self, source, store, clock, timestamp):
        """A numeric but out-of-range timestamp is deleted and refetched."""
        await store.set(ENTRIES_KEY, [{"code": 9, "message": "C"}])
        await store.set(TIMESTAMP_KEY, timestamp)
        cache = CatalogCache(source, store, clock, ttl=TTL)

        await cache.init_catalog()

        assert source.calls == 1
        assert cache.by_code(100).message == "A"
        assert store.deletes == [TIMESTAMP_KEY, ENTRIES_KEY]

    @pytest.mark.asyncio
    async def test_force_refresh_skips_snapshot(self, source, store, clock):
        """``force_refresh`` ignores even a fresh durable snapshot."""
        await persist_snapshot(store, [entry(9, None, "C")], clock.now())
        cache = CatalogCache(source, store, clock, ttl=TTL)

        await cache.init_catalog(force_refresh=True)

        assert source.calls == 1
        assert cache.by_code(9) is None


class TestStorageFailures:
    """The durable store failing never breaks the cache."""

    @pytest.mark.asyncio
    async def test_unreadable_store_falls_back_to_network(self, cache, source, store):
        """A failing read is absorbed and the catalog is fetched."""
        store.fail_get = True

        await cache.init_catalog()

        assert source.calls == 1
        assert cache.is_initialized()

    @pytest.mark.asyncio
    async def test_persist_failure_is_reported_not_raised(self, source, store, clock, caplog):
        """A failed background write goes to the log and the error callback."""
        errors: list[BaseException] = []
        store.fail_set = True
        cache = CatalogCache(
            source, store, clock, ttl=TTL, on_background_error=errors.append
        )

        await cache.init_catalog()
        await cache.drain()

        assert cache.by_code(100).message == "A"
        assert len(errors) == 1
        assert "set failed" in str(errors[0])
        assert "background task failed" in caplog.text

    @pytest.mark.asyncio
    async def test_failed_delete_of_expired_snapshot_is_absorbed(self, source, store, clock):
        """Failing to delete a stale snapshot does not block the refresh."""
        await persist_snapshot(store, [entry(9, None, "old")], clock.now() - TTL * 2)
        store.fail_delete = True
        cache = CatalogCache(source, store, clock, ttl=TTL)

        await cache.init_catalog()

        assert source.calls == 1
        assert cache.by_code(100).message == "A"


class TestClearCache:
    """`clear_cache` empties memory at once and the durable snapshot in the background."""

    @pytest.mark.asyncio
    async def test_clear_empties_indexes_and_timestamp(self, cache):
        """Both indexes and the timestamp are reset synchronously."""
        await cache.init_catalog()

        cache.clear_cache()

        assert not cache.is_initialized()
        assert cache.by_key("K") is None
        assert cache.timestamp is None
        assert cache.is_expired()

    @pytest.mark.asyncio
    async def test_clear_deletes_durable_snapshot(self, cache, store):
        """The persisted snapshot is gone once background work drains."""
        await cache.init_catalog()
        await cache.drain()

        cache.clear_cache()
        await cache.drain()

        assert store.keys() == []

    @pytest.mark.asyncio
    async def test_init_after_clear_refetches(self, cache, source):
        """After a clear the next init goes to the network, not the old snapshot."""
        await cache.init_catalog()
        await cache.drain()

        cache.clear_cache()
        await cache.init_catalog()

        assert source.calls == 2

    @staticmethod
    def test_clear_without_event_loop_is_memory_only(source, clock):
        """Outside an event loop only the in-memory state is reset."""
        store = InMemoryKeyValueStore()
        cache = CatalogCache(source, store, clock, ttl=TTL)

        cache.clear_cache()

        assert cache.timestamp is None
        assert not cache._background


def test_lookups_never_initialize(cache, source):
    """`by_code`/`by_key` are pure reads of the current indexes."""
    assert cache.by_code(100) is None
    assert cache.by_key("K") is None
    assert source.calls == 0
