"""Credentials, validation rules and the verifier capability."""

from .errors import AuthError, AuthenticationFailure, SessionBusyError, ValidationError
from .models import (
    AuthResult,
    LoginCredentials,
    PreferenceState,
    SessionState,
    SessionStatus,
    SignupCredentials,
    ThemeMode,
    User,
)
from .validation import (
    check_login,
    check_signup,
    validate_login_form,
    validate_signup_form,
)
from .verifier import CredentialVerifier, LocalCredentialVerifier

__all__ = [
    "AuthError",
    "AuthenticationFailure",
    "SessionBusyError",
    "ValidationError",
    "AuthResult",
    "LoginCredentials",
    "PreferenceState",
    "SessionState",
    "SessionStatus",
    "SignupCredentials",
    "ThemeMode",
    "User",
    "check_login",
    "check_signup",
    "validate_login_form",
    "validate_signup_form",
    "CredentialVerifier",
    "LocalCredentialVerifier",
]
