"""Key-value persistence contract.

State containers talk to durable storage only through `KeyValueStore`:
string keys, string values, asynchronous calls. Backends wrap their own
I/O failures in `PersistenceError`.
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from typing import Dict, Optional


class PersistenceError(Exception):
    """Raised when a key-value backend cannot complete a read or write."""


class KeyValueStore(ABC):
    """Asynchronous get/set/remove by string key."""

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        """Return the stored value, or None when the key is absent."""

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        """Store `value` under `key`, replacing any previous value."""

    @abstractmethod
    async def remove(self, key: str) -> None:
        """Delete `key`. Removing an absent key is not an error."""

    async def close(self) -> None:
        """Release backend resources."""


class InMemoryKeyValueStore(KeyValueStore):
    """Dict-backed store.

    Contents live as long as the object does, so two state containers built
    on the same instance behave like two application launches sharing a disk.
    """

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._data: Dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> Optional[str]:
        await asyncio.sleep(0)
        return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        await asyncio.sleep(0)
        self._data[key] = value

    async def remove(self, key: str) -> None:
        await asyncio.sleep(0)
        self._data.pop(key, None)

    def snapshot(self) -> Dict[str, str]:
        """Copy of the current contents."""
        return dict(self._data)
