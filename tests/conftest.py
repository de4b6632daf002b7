from __future__ import annotations

import asyncio
from typing import Dict, List, Optional

import pytest

from keeper.shared.core import events
from keeper.shared.core.event_bus import EventBus, EventPayload
from keeper.shared.domain.auth.errors import AuthenticationFailure
from keeper.shared.domain.auth.models import LoginCredentials, User
from keeper.shared.domain.auth.verifier import CredentialVerifier, LocalCredentialVerifier
from keeper.shared.infrastructure.persistence.kv_store import (
    InMemoryKeyValueStore,
    KeyValueStore,
    PersistenceError,
)
from keeper.client.state import PreferenceStore, SessionStore


class FlakyKeyValueStore(KeyValueStore):
    """In-memory store whose individual operations can be switched to fail."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self.inner = InMemoryKeyValueStore(initial)
        self.fail_get = False
        self.fail_set = False
        self.fail_remove = False
        self.calls: List[tuple] = []

    async def get(self, key: str) -> Optional[str]:
        self.calls.append(("get", key))
        if self.fail_get:
            raise PersistenceError("disk unavailable")
        return await self.inner.get(key)

    async def set(self, key: str, value: str) -> None:
        self.calls.append(("set", key, value))
        if self.fail_set:
            raise PersistenceError("disk full")
        await self.inner.set(key, value)

    async def remove(self, key: str) -> None:
        self.calls.append(("remove", key))
        if self.fail_remove:
            raise PersistenceError("disk read-only")
        await self.inner.remove(key)

    async def close(self) -> None:
        self.calls.append(("close",))

    def snapshot(self) -> Dict[str, str]:
        return self.inner.snapshot()


class GatedKeyValueStore(InMemoryKeyValueStore):
    """Holds every `get` until `release()` is called."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        super().__init__(initial)
        self.gate = asyncio.Event()

    def release(self) -> None:
        self.gate.set()

    async def get(self, key: str) -> Optional[str]:
        await self.gate.wait()
        return await super().get(key)


class GatedVerifier(CredentialVerifier):
    """Local verifier that waits for `release()` before answering."""

    def __init__(self) -> None:
        self.gate = asyncio.Event()
        self.entered = asyncio.Event()
        self.calls = 0
        self._inner = LocalCredentialVerifier()

    def release(self) -> None:
        self.gate.set()

    async def verify(self, credentials: LoginCredentials) -> User:
        self.calls += 1
        self.entered.set()
        await self.gate.wait()
        return await self._inner.verify(credentials)


class RejectingVerifier(CredentialVerifier):
    def __init__(self, message: str = "Invalid email or password") -> None:
        self.message = message

    async def verify(self, credentials: LoginCredentials) -> User:
        raise AuthenticationFailure(self.message)


class BrokenVerifier(CredentialVerifier):
    async def verify(self, credentials: LoginCredentials) -> User:
        raise RuntimeError("backend exploded")


class HangingVerifier(CredentialVerifier):
    async def verify(self, credentials: LoginCredentials) -> User:
        await asyncio.Event().wait()
        raise AssertionError("unreachable")


class EventRecorder:
    """Collects payloads published on the bus for later assertions."""

    def __init__(self) -> None:
        self.session: List[EventPayload] = []
        self.preference: List[EventPayload] = []
        self.storage_errors: List[EventPayload] = []

    async def attach(self, bus: EventBus) -> "EventRecorder":
        await bus.subscribe(events.TOPIC_SESSION_CHANGED, self._on_session)
        await bus.subscribe(events.TOPIC_PREFERENCE_CHANGED, self._on_preference)
        await bus.subscribe(events.TOPIC_STORAGE_ERROR, self._on_storage_error)
        return self

    async def _on_session(self, payload: EventPayload) -> None:
        self.session.append(payload)

    async def _on_preference(self, payload: EventPayload) -> None:
        self.preference.append(payload)

    async def _on_storage_error(self, payload: EventPayload) -> None:
        self.storage_errors.append(payload)


@pytest.fixture
def bus() -> EventBus:
    return EventBus()


@pytest.fixture
def kv() -> FlakyKeyValueStore:
    return FlakyKeyValueStore()


@pytest.fixture
def session_store(kv: FlakyKeyValueStore, bus: EventBus) -> SessionStore:
    return SessionStore(kv, LocalCredentialVerifier(), bus)


@pytest.fixture
def preference_store(kv: FlakyKeyValueStore, bus: EventBus) -> PreferenceStore:
    return PreferenceStore(kv, bus)
