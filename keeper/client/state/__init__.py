"""Client State Management.

Architecture:
- SessionStore: authentication state (login, signup, logout, restore)
- PreferenceStore: display-mode preference (toggle, restore)
- Store: container that wires both over one backend and one EventBus
"""

from .preference_state import PreferenceStore
from .session_state import SessionStore
from .store import Store

__all__ = ["PreferenceStore", "SessionStore", "Store"]
