"""Durable key-value store interface definitions."""

import abc
from typing import Any


class KeyValueStoreError(Exception):
    """Base class for key-value store errors."""


class StoreUnavailableError(KeyValueStoreError):
    """Raised on genuine storage failures (unreachable, quota, corruption).

    Callers treat this as a soft failure and carry on without persistence.
    """


class KeyValueStore(abc.ABC):
    """Abstract base class for a scoped, asynchronous key-value store.

    Absence is never an error: `get` on a missing key resolves to ``None`` and
    `delete` on a missing key is a no-op. Values must be JSON-serialisable.
    """

    @abc.abstractmethod
    async def get(self, key: str) -> Any | None:
        """Return the value stored under *key*, or ``None`` if absent.

        Raises:
            StoreUnavailableError: If the underlying storage fails.
        """

    @abc.abstractmethod
    async def set(self, key: str, value: Any) -> None:
        """Store *value* under *key*, overwriting any previous value.

        Raises:
            StoreUnavailableError: If the underlying storage fails.
        """

    @abc.abstractmethod
    async def delete(self, key: str) -> None:
        """Remove *key* from the store; missing keys are ignored.

        Raises:
            StoreUnavailableError: If the underlying storage fails.
        """
