"""
Shared Infrastructure Module
=============================

Technical adapters for external systems (key-value persistence).
"""

# Persistence
from keeper.shared.infrastructure.persistence import (
    KeyValueStore,
    PersistenceError,
    InMemoryKeyValueStore,
    DuckDBKeyValueStore,
    create_key_value_store,
)

__all__ = [
    # Persistence
    "KeyValueStore",
    "PersistenceError",
    "InMemoryKeyValueStore",
    "DuckDBKeyValueStore",
    "create_key_value_store",
]
