"""DuckDB key-value backend for Keeper.

Stores every key in a single two-column table. DuckDB calls are blocking, so
each operation is offloaded to the default executor and serialized on one
connection with a thread lock.
"""

import asyncio
import logging
import threading
from pathlib import Path
from typing import Any, Callable, Optional, TypeVar

import duckdb

from keeper.shared.infrastructure.persistence.kv_store import KeyValueStore, PersistenceError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class DuckDBKeyValueStore(KeyValueStore):
    """Durable key-value store backed by a DuckDB file.

    The connection is opened lazily on the first call; pass ":memory:" for a
    throwaway database.
    """

    def __init__(self, db_path: str = ":memory:", table_name: str = "kv_store"):
        if not table_name.isidentifier():
            raise ValueError(f"Invalid table name: {table_name!r}")
        self.db_path = db_path
        self.table_name = table_name
        self.conn: Optional[duckdb.DuckDBPyConnection] = None
        self._conn_lock = threading.Lock()

    def _connect(self) -> duckdb.DuckDBPyConnection:
        """Open the database and create the schema on first use."""
        if self.conn is None:
            if self.db_path != ":memory:":
                Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
            self.conn = duckdb.connect(self.db_path)
            self._create_schema()
            logger.info(f"Key-value database initialized: {self.db_path}")
        return self.conn

    def _create_schema(self) -> None:
        self.conn.execute(f"""
            CREATE TABLE IF NOT EXISTS {self.table_name} (
                key VARCHAR PRIMARY KEY,
                value TEXT NOT NULL,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)

    def _get_sync(self, key: str) -> Optional[str]:
        row = self._connect().execute(
            f"SELECT value FROM {self.table_name} WHERE key = ?",
            (key,)
        ).fetchone()
        return row[0] if row else None

    def _set_sync(self, key: str, value: str) -> None:
        self._connect().execute(
            f"INSERT OR REPLACE INTO {self.table_name} (key, value, updated_at) VALUES (?, ?, CURRENT_TIMESTAMP)",
            (key, value)
        )

    def _remove_sync(self, key: str) -> None:
        self._connect().execute(
            f"DELETE FROM {self.table_name} WHERE key = ?",
            (key,)
        )

    def _locked(self, operation: str, fn: Callable[..., T], *args: Any) -> T:
        with self._conn_lock:
            try:
                return fn(*args)
            except (duckdb.Error, OSError) as e:
                raise PersistenceError(f"DuckDB {operation} failed on {self.db_path}: {e}") from e

    async def _run(self, operation: str, fn: Callable[..., T], *args: Any) -> T:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._locked, operation, fn, *args)

    async def get(self, key: str) -> Optional[str]:
        return await self._run("get", self._get_sync, key)

    async def set(self, key: str, value: str) -> None:
        await self._run("set", self._set_sync, key, value)

    async def remove(self, key: str) -> None:
        await self._run("remove", self._remove_sync, key)

    def _close_sync(self) -> None:
        with self._conn_lock:
            if self.conn is not None:
                try:
                    self.conn.close()
                except duckdb.Error as e:
                    logger.warning(f"Error closing key-value database {self.db_path}: {e}")
                finally:
                    self.conn = None

    async def close(self) -> None:
        """Close the connection; a later call reopens it."""
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, self._close_sync)
