"""Backend selection from configuration."""

import logging

from keeper.shared.core.configuration import StorageConfig
from keeper.shared.infrastructure.persistence.duckdb_store import DuckDBKeyValueStore
from keeper.shared.infrastructure.persistence.kv_store import InMemoryKeyValueStore, KeyValueStore

logger = logging.getLogger(__name__)


def create_key_value_store(config: StorageConfig) -> KeyValueStore:
    """Build the key-value backend named by `config.backend`."""
    if config.backend == "memory":
        logger.debug("Using in-memory key-value store")
        return InMemoryKeyValueStore()
    if config.backend == "duckdb":
        logger.debug(f"Using DuckDB key-value store at {config.db_path}")
        return DuckDBKeyValueStore(db_path=config.db_path, table_name=config.table_name)
    raise ValueError(f"Unknown storage backend: {config.backend}")
