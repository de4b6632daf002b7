from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field


class ThemeMode(str, Enum):
    LIGHT = "light"
    DARK = "dark"

    def toggled(self) -> "ThemeMode":
        return ThemeMode.DARK if self is ThemeMode.LIGHT else ThemeMode.LIGHT


class SessionStatus(str, Enum):
    INITIALIZING = "initializing"
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATING = "authenticating"
    AUTHENTICATED = "authenticated"


class User(BaseModel):
    """
    The person currently using the app.

    Serialized to JSON under the session storage key. A new login or signup
    replaces the record wholesale; there are no partial updates.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1, description="Unique id generated at session creation")
    email: str = Field(description="Email address used to authenticate")
    name: str = Field(description="Display name")


class LoginCredentials(BaseModel):
    """Transient login input. Validated, then discarded."""

    email: str = ""
    password: str = Field(default="", repr=False)


class SignupCredentials(LoginCredentials):
    """Transient registration input."""

    name: str = ""


class AuthResult(BaseModel):
    """Structured outcome of login/signup for the presentation layer to display."""

    model_config = ConfigDict(frozen=True)

    success: bool
    user: Optional[User] = None
    error: Optional[str] = None

    @classmethod
    def ok(cls, user: User) -> "AuthResult":
        return cls(success=True, user=user)

    @classmethod
    def failed(cls, error: str) -> "AuthResult":
        return cls(success=False, error=error)


class SessionState(BaseModel):
    """
    Snapshot of authentication state.

    Notes
    - `is_authenticated` is derived from `user`, never stored separately.
    - `is_initializing` is true only until the one-time startup restore finishes.
    """

    model_config = ConfigDict(frozen=True)

    user: Optional[User] = None
    is_loading: bool = False
    is_initializing: bool = True

    @computed_field
    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    @computed_field
    @property
    def status(self) -> SessionStatus:
        if self.is_initializing:
            return SessionStatus.INITIALIZING
        if self.is_loading:
            return SessionStatus.AUTHENTICATING
        if self.user is not None:
            return SessionStatus.AUTHENTICATED
        return SessionStatus.UNAUTHENTICATED


class PreferenceState(BaseModel):
    """Snapshot of the display-mode preference."""

    model_config = ConfigDict(frozen=True)

    mode: ThemeMode = ThemeMode.LIGHT
    is_loading: bool = True
