"""Key-value store adapters: null (no durable storage), in-memory, and SQLAlchemy-backed."""

from .memory import InMemoryKeyValueStore
from .null import NullKeyValueStore
from .sqlalchemy_adapter import SqlAlchemyKeyValueStore

__all__ = ["InMemoryKeyValueStore", "NullKeyValueStore", "SqlAlchemyKeyValueStore"]
