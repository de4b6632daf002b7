"""
Shared Domain Module
====================

Business rules for sessions: data model, credential validation, verification.
"""

from keeper.shared.domain.auth import (
    AuthResult,
    CredentialVerifier,
    LocalCredentialVerifier,
    LoginCredentials,
    PreferenceState,
    SessionState,
    SignupCredentials,
    ThemeMode,
    User,
)

__all__ = [
    "AuthResult",
    "CredentialVerifier",
    "LocalCredentialVerifier",
    "LoginCredentials",
    "PreferenceState",
    "SessionState",
    "SignupCredentials",
    "ThemeMode",
    "User",
]
