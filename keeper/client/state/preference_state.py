"""Display-mode preference state."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional

from keeper.shared.core import events
from keeper.shared.core.configuration import PreferenceConfig
from keeper.shared.core.event_bus import EventBus
from keeper.shared.domain.auth.models import PreferenceState, ThemeMode
from keeper.shared.infrastructure.persistence.kv_store import KeyValueStore

logger = logging.getLogger(__name__)


class PreferenceStore:
    """Light/dark mode with restore-then-toggle lifecycle.

    `toggle()` is synchronous: the flip is visible (and published under
    `preference.changed`) before it returns, and the write to storage runs
    as a background task. Writes are applied in toggle order; a failed write
    is logged and never reverts the flip.
    """

    STORE_NAME = "preferences"

    def __init__(
        self,
        kv_store: KeyValueStore,
        event_bus: EventBus,
        *,
        storage_key: str = "@app_theme",
        default_mode: ThemeMode | str = ThemeMode.LIGHT,
    ) -> None:
        self.kv = kv_store
        self.bus = event_bus
        self.storage_key = storage_key

        self._state = PreferenceState(mode=ThemeMode(default_mode))
        self._restore_started = False
        self._generation = 0
        self._write_lock = asyncio.Lock()
        self._pending_writes: set[asyncio.Task] = set()

    @classmethod
    def from_config(cls, config: PreferenceConfig, kv_store: KeyValueStore, event_bus: EventBus) -> "PreferenceStore":
        return cls(
            kv_store,
            event_bus,
            storage_key=config.theme_storage_key,
            default_mode=config.default_theme,
        )

    @property
    def state(self) -> PreferenceState:
        return self._state

    @property
    def mode(self) -> ThemeMode:
        return self._state.mode

    async def restore(self) -> PreferenceState:
        """Adopt the stored mode if it is a recognized literal; runs once."""
        if self._restore_started:
            return self._state
        self._restore_started = True

        generation = self._generation
        stored: Optional[ThemeMode] = None
        try:
            stored = await self._load_mode()
        finally:
            # A toggle made while the read was outstanding wins
            if stored is not None and self._generation == generation:
                self._set_state(mode=stored, is_loading=False)
            else:
                self._set_state(is_loading=False)

        return self._state

    def toggle(self) -> ThemeMode:
        """Flip between light and dark and schedule the write.

        Must be called from code running inside the event loop.
        """
        loop = asyncio.get_running_loop()
        new_mode = self._state.mode.toggled()
        self._generation += 1
        self._set_state(mode=new_mode)

        task = loop.create_task(self._save_mode(new_mode))
        self._pending_writes.add(task)
        task.add_done_callback(self._pending_writes.discard)
        return new_mode

    async def wait_until_idle(self, timeout: Optional[float] = None) -> bool:
        """Wait for scheduled writes. Returns False if `timeout` expired first."""
        if not self._pending_writes:
            return True
        _, pending = await asyncio.wait(list(self._pending_writes), timeout=timeout)
        if pending:
            logger.warning(f"{len(pending)} preference write(s) still pending after {timeout}s")
        return not pending

    async def _load_mode(self) -> Optional[ThemeMode]:
        try:
            raw = await self.kv.get(self.storage_key)
        except Exception as exc:
            self._storage_failed("get", exc)
            return None
        if raw is None:
            return None

        try:
            return ThemeMode(raw)
        except ValueError:
            logger.warning(f"Ignoring unrecognized display mode {raw!r} under '{self.storage_key}'")
            return None

    async def _save_mode(self, mode: ThemeMode) -> None:
        async with self._write_lock:
            try:
                await self.kv.set(self.storage_key, mode.value)
            except Exception as exc:
                self._storage_failed("set", exc)

    def _storage_failed(self, operation: events.StorageOperation, exc: Exception) -> None:
        logger.warning(f"Preference storage {operation} failed for '{self.storage_key}': {exc}")
        self.bus.publish_nowait(
            events.TOPIC_STORAGE_ERROR,
            events.create_storage_error_event(self.STORE_NAME, operation, self.storage_key, exc),
        )

    def _set_state(self, **changes: Any) -> None:
        self._state = self._state.model_copy(update=changes)
        self.bus.publish_nowait(
            events.TOPIC_PREFERENCE_CHANGED,
            events.create_preference_changed_event(self._state),
        )
