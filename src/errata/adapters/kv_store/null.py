"""Key-value store used when no durable storage is available."""

from typing import Any

from errata.interfaces.kv_store import KeyValueStore


class NullKeyValueStore(KeyValueStore):
    """A store that stores nothing.

    Every operation succeeds immediately: reads resolve to ``None`` and writes
    and deletes are skipped. This lets the cache run identically in execution
    contexts that have no durable storage configured.
    """

    async def get(self, key: str) -> Any | None:
        return None

    async def set(self, key: str, value: Any) -> None:
        return None

    async def delete(self, key: str) -> None:
        return None
