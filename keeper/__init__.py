"""Keeper: client-side session and preference state."""

from .client.state import PreferenceStore, SessionStore, Store
from .shared.core.event_bus import EventBus

__all__ = ["EventBus", "PreferenceStore", "SessionStore", "Store"]
