"""Session State Management.

Owns who is signed in. Every change replaces the immutable `SessionState`
snapshot and is announced on the EventBus under `session.changed`, so
observers re-render without polling.

Lifecycle:
- restore(): one-time startup read of the persisted user record
- login()/signup(): validate, verify, adopt the user, persist it
- logout(): forget the persisted record and clear the session
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Optional

from pydantic import ValidationError as SchemaValidationError

from keeper.shared.core import events
from keeper.shared.core.configuration import SessionConfig
from keeper.shared.core.event_bus import EventBus
from keeper.shared.domain.auth.errors import AuthError, AuthenticationFailure, SessionBusyError
from keeper.shared.domain.auth.models import (
    AuthResult,
    LoginCredentials,
    SessionState,
    SignupCredentials,
    User,
)
from keeper.shared.domain.auth.validation import check_login, check_signup
from keeper.shared.domain.auth.verifier import CredentialVerifier
from keeper.shared.infrastructure.persistence.kv_store import KeyValueStore

logger = logging.getLogger(__name__)

BUSY_MESSAGE = "Another session operation is already in progress"


class SessionStore:
    """Authentication state plus the operations that change it.

    Session mutations share a single in-flight permit. With
    `reject_concurrent` a login/signup that finds the permit taken fails
    immediately; otherwise it waits its turn. Logout always waits.

    Persistence is best-effort: storage failures are logged and published on
    `storage.error` but never undo an in-memory transition.
    """

    STORE_NAME = "session"

    def __init__(
        self,
        kv_store: KeyValueStore,
        verifier: CredentialVerifier,
        event_bus: EventBus,
        *,
        storage_key: str = "AUTH_USER",
        auth_timeout: Optional[float] = 10.0,
        reject_concurrent: bool = True,
    ) -> None:
        self.kv = kv_store
        self.verifier = verifier
        self.bus = event_bus
        self.storage_key = storage_key
        self.auth_timeout = auth_timeout
        self.reject_concurrent = reject_concurrent

        self._state = SessionState()
        self._permit = asyncio.Lock()
        self._restore_started = False
        # Bumped by every completed login/signup/logout so a slow restore
        # cannot overwrite a newer session.
        self._generation = 0

    @classmethod
    def from_config(
        cls,
        config: SessionConfig,
        kv_store: KeyValueStore,
        verifier: CredentialVerifier,
        event_bus: EventBus,
    ) -> "SessionStore":
        return cls(
            kv_store,
            verifier,
            event_bus,
            storage_key=config.user_storage_key,
            auth_timeout=config.auth_timeout_seconds,
            reject_concurrent=config.reject_concurrent,
        )

    @property
    def state(self) -> SessionState:
        return self._state

    # --- Public Actions ---

    async def restore(self) -> SessionState:
        """Recover the previous session from storage.

        Runs once; later calls return the current snapshot. Unreadable or
        missing records and read failures all resolve to signed-out, and
        `is_initializing` is cleared on every path.
        """
        if self._restore_started:
            return self._state
        self._restore_started = True

        generation = self._generation
        user: Optional[User] = None
        try:
            user = await self._load_user()
        finally:
            if self._generation == generation:
                self._set_state(user=user, is_initializing=False)
            elif self._state.is_initializing:
                self._set_state(is_initializing=False)

        if user is not None and self._state.user == user:
            logger.info(f"Restored session for user {user.id}")
        return self._state

    async def login(self, credentials: LoginCredentials) -> AuthResult:
        """Sign in with email and password."""
        return await self._establish(credentials, check_login, "Login failed")

    async def signup(self, credentials: SignupCredentials) -> AuthResult:
        """Create an account and sign in with it."""
        return await self._establish(credentials, check_signup, "Signup failed")

    async def logout(self) -> None:
        """Sign out. Never fails and is safe to repeat."""
        async with self._permit:
            try:
                await self.kv.remove(self.storage_key)
            except Exception as exc:
                self._storage_failed("remove", exc)
            finally:
                self._generation += 1
                self._set_state(user=None, is_loading=False, is_initializing=False)
        logger.info("Session cleared")

    # --- Internals ---

    async def _establish(
        self,
        credentials: LoginCredentials,
        check: Callable[[Any], None],
        failure_message: str,
    ) -> AuthResult:
        try:
            check(credentials)
            if self.reject_concurrent and self._permit.locked():
                raise SessionBusyError(BUSY_MESSAGE)
        except AuthError as exc:
            logger.info(f"{failure_message}: {exc}")
            return AuthResult.failed(str(exc))

        async with self._permit:
            self._set_state(is_loading=True)
            try:
                user = await self._verify(credentials)
            except AuthenticationFailure as exc:
                logger.info(f"{failure_message}: {exc}")
                self._set_state(is_loading=False)
                return AuthResult.failed(str(exc))
            except Exception:
                logger.exception(f"{failure_message}: credential verifier raised")
                self._set_state(is_loading=False)
                return AuthResult.failed(failure_message)
            except asyncio.CancelledError:
                self._set_state(is_loading=False)
                raise

            self._generation += 1
            self._set_state(user=user, is_loading=False)
            await self._save_user(user)

        logger.info(f"Session established for user {user.id}")
        return AuthResult.ok(user)

    async def _verify(self, credentials: LoginCredentials) -> User:
        if self.auth_timeout is None:
            return await self.verifier.verify(credentials)
        try:
            return await asyncio.wait_for(self.verifier.verify(credentials), timeout=self.auth_timeout)
        except asyncio.TimeoutError as exc:
            raise AuthenticationFailure("Authentication timed out") from exc

    async def _load_user(self) -> Optional[User]:
        try:
            raw = await self.kv.get(self.storage_key)
        except Exception as exc:
            self._storage_failed("get", exc)
            return None
        if not raw:
            return None

        try:
            return User.model_validate_json(raw)
        except SchemaValidationError as exc:
            logger.warning(
                f"Discarding unreadable user record under '{self.storage_key}' "
                f"({exc.error_count()} error(s))"
            )
            return None

    async def _save_user(self, user: User) -> None:
        try:
            await self.kv.set(self.storage_key, user.model_dump_json())
        except Exception as exc:
            self._storage_failed("set", exc)

    def _storage_failed(self, operation: events.StorageOperation, exc: Exception) -> None:
        logger.warning(f"Session storage {operation} failed for '{self.storage_key}': {exc}")
        self.bus.publish_nowait(
            events.TOPIC_STORAGE_ERROR,
            events.create_storage_error_event(self.STORE_NAME, operation, self.storage_key, exc),
        )

    def _set_state(self, **changes: Any) -> None:
        self._state = self._state.model_copy(update=changes)
        self.bus.publish_nowait(
            events.TOPIC_SESSION_CHANGED,
            events.create_session_changed_event(self._state),
        )
