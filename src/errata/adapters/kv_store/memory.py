"""In-memory implementation of the KeyValueStore interface."""

import json
from typing import Any

from errata.interfaces.kv_store import KeyValueStore


class InMemoryKeyValueStore(KeyValueStore):
    """In-memory implementation of the KeyValueStore interface.

    This implementation is intended for testing and development purposes only.
    It does not persist data across processes. Values are copied through JSON on
    the way in and out, so stored state has the same shape a durable backend
    would return and cannot be mutated through a caller's reference.
    """

    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    async def get(self, key: str) -> Any | None:
        if (raw := self._data.get(key)) is None:
            return None
        return json.loads(raw)

    async def set(self, key: str, value: Any) -> None:
        self._data[key] = json.dumps(value)

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        """Return the keys currently stored (test helper)."""
        return list(self._data)
