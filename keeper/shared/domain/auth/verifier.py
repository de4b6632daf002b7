"""Credential verification capability.

`SessionStore` never decides who a user is; it hands well-formed
credentials to a `CredentialVerifier` and adopts the `User` it returns.
A network-backed verifier can replace the local one without changing the
store.
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Callable
from uuid import uuid4

from .models import LoginCredentials, SignupCredentials, User

logger = logging.getLogger(__name__)


def _new_user_id() -> str:
    return uuid4().hex


class CredentialVerifier(ABC):
    """Turns credentials into a User or raises AuthenticationFailure."""

    @abstractmethod
    async def verify(self, credentials: LoginCredentials) -> User:
        """Verify login or signup credentials.

        `SignupCredentials` is a subclass of `LoginCredentials`; implementations
        distinguish account creation with an isinstance check.
        """


class LocalCredentialVerifier(CredentialVerifier):
    """
    Offline stand-in that accepts every well-formed credential.

    - Login: display name is the email local-part ("ann@x.io" -> "ann"), which
      may be empty ("@x.io" -> "").
    - Signup: display name is the one supplied.
    - Every call issues a fresh id, so two logins never share a session id.

    `delay` simulates network latency.
    """

    def __init__(self, *, delay: float = 0.0, id_factory: Callable[[], str] = _new_user_id) -> None:
        if delay < 0:
            raise ValueError("delay must be >= 0")
        self._delay = delay
        self._id_factory = id_factory

    async def verify(self, credentials: LoginCredentials) -> User:
        if self._delay:
            await asyncio.sleep(self._delay)

        # Email and name are kept exactly as entered
        email = credentials.email
        if isinstance(credentials, SignupCredentials):
            name = credentials.name
        else:
            name = email.split("@", 1)[0]

        user = User(id=self._id_factory(), email=email, name=name)
        logger.debug(f"Local verifier issued user id {user.id}")
        return user
