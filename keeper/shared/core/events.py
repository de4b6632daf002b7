"""Canonical event definitions for Keeper."""

from __future__ import annotations

from typing import TYPE_CHECKING, Literal

from .event_bus import EventPayload

if TYPE_CHECKING:
    from keeper.shared.domain.auth.models import PreferenceState, SessionState

# State change topics
TOPIC_SESSION_CHANGED = "session.changed"
TOPIC_PREFERENCE_CHANGED = "preference.changed"

# Best-effort persistence failures (informational)
TOPIC_STORAGE_ERROR = "storage.error"

StorageOperation = Literal["get", "set", "remove"]


def create_session_changed_event(state: "SessionState") -> EventPayload:
    """Create a session changed event carrying the new snapshot."""
    return {
        "state": state,
    }


def create_preference_changed_event(state: "PreferenceState") -> EventPayload:
    """Create a preference changed event carrying the new snapshot."""
    return {
        "state": state,
    }


def create_storage_error_event(
    store: str,
    operation: StorageOperation,
    key: str,
    error: BaseException,
) -> EventPayload:
    """Create a storage error event.

    Args:
        store: Name of the state container that issued the call
        operation: Key-value operation that failed
        key: Storage key involved
        error: The exception raised by the backend
    """
    return {
        "store": store,
        "operation": operation,
        "key": key,
        "error": str(error) or type(error).__name__,
    }
