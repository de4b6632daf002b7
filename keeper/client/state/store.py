"""Application State Store.

Groups the state containers of one application process. Build it once at
startup and hand it (or its members) to every consumer explicitly.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from keeper.shared.core.configuration import SystemConfig
from keeper.shared.core.event_bus import EventBus
from keeper.shared.domain.auth.verifier import CredentialVerifier, LocalCredentialVerifier
from keeper.shared.infrastructure.persistence.factory import create_key_value_store
from keeper.shared.infrastructure.persistence.kv_store import KeyValueStore

from .preference_state import PreferenceStore
from .session_state import SessionStore

logger = logging.getLogger(__name__)


class Store:
    """State store for the application.

    Usage:
        # During app initialization
        store = Store.from_config(config)
        await store.initialize()

        # In a UI component that received `store`
        await store.event_bus.subscribe("session.changed", on_session_changed)
        result = await store.session.login(credentials)
    """

    def __init__(
        self,
        session: SessionStore,
        preferences: PreferenceStore,
        event_bus: EventBus,
        kv_store: KeyValueStore,
    ) -> None:
        self.session = session
        self.preferences = preferences
        self.event_bus = event_bus
        self.kv_store = kv_store

    @classmethod
    def from_config(
        cls,
        config: SystemConfig,
        *,
        event_bus: Optional[EventBus] = None,
        kv_store: Optional[KeyValueStore] = None,
        verifier: Optional[CredentialVerifier] = None,
    ) -> "Store":
        """Wire both state containers over one backend and one bus.

        Args:
            config: Resolved system configuration
            event_bus: Shared bus; a new one is created when omitted
            kv_store: Backend override; otherwise built from `config.storage`
            verifier: Verifier override; defaults to the local stand-in
        """
        bus = event_bus or EventBus()
        kv = kv_store or create_key_value_store(config.storage)
        verifier = verifier or LocalCredentialVerifier(delay=config.session.simulated_auth_delay)

        session = SessionStore.from_config(config.session, kv, verifier, bus)
        preferences = PreferenceStore.from_config(config.preferences, kv, bus)
        return cls(session, preferences, bus, kv)

    async def initialize(self) -> None:
        """Run both startup restores concurrently."""
        await asyncio.gather(self.session.restore(), self.preferences.restore())
        logger.info(
            f"State restored: session={self.session.state.status.value} "
            f"theme={self.preferences.mode.value}"
        )

    async def close(self, timeout: float = 5.0) -> None:
        """Flush pending preference writes and observers, then close the backend.

        Observers still running after `timeout` are left behind; the backend
        is closed and every subscription is dropped regardless.
        """
        await self.preferences.wait_until_idle(timeout)
        await self.event_bus.wait_until_idle(timeout)
        self.event_bus.clear()
        await self.kv_store.close()
