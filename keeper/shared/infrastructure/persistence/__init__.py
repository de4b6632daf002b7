"""Persistence adapters (in-memory, DuckDB)."""

from keeper.shared.infrastructure.persistence.kv_store import (
    InMemoryKeyValueStore,
    KeyValueStore,
    PersistenceError,
)
from keeper.shared.infrastructure.persistence.duckdb_store import DuckDBKeyValueStore
from keeper.shared.infrastructure.persistence.factory import create_key_value_store

__all__ = [
    "KeyValueStore",
    "PersistenceError",
    "InMemoryKeyValueStore",
    "DuckDBKeyValueStore",
    "create_key_value_store",
]
