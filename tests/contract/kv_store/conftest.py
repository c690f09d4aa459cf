"""Fixtures for durable key-value store contract tests.

Provided fixtures
-----------------
- **store**: Parametrized backend factory returning a **fresh** durable
  `KeyValueStore` per test: ``"memory"`` (`InMemoryKeyValueStore`) and
  ``"sqlite"`` (`SqlAlchemyKeyValueStore` over a temp SQLite file). The null
  store is deliberately absent; it stores nothing by contract.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from errata.adapters.kv_store import InMemoryKeyValueStore, SqlAlchemyKeyValueStore

if TYPE_CHECKING:
    from errata.interfaces.kv_store import KeyValueStore


@pytest.fixture(params=["memory", "sqlite"])
def store(request: pytest.FixtureRequest) -> KeyValueStore:
    """Return a fresh store for the requested backend."""
    match request.param:
        case "memory":
            return InMemoryKeyValueStore()
        case "sqlite":
            return SqlAlchemyKeyValueStore(request.getfixturevalue("sqlite_engine_file"))
        case _:
            raise ValueError(f"unknown store type: {request.param}")
