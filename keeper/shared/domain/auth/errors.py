"""Error taxonomy for session operations."""


class AuthError(Exception):
    """Base class for failures surfaced to the caller as a message."""


class ValidationError(AuthError):
    """Credentials are malformed; raised before any state change or I/O."""


class AuthenticationFailure(AuthError):
    """The credential verifier rejected the credentials or did not answer in time."""


class SessionBusyError(AuthError):
    """Another session mutation already holds the in-flight permit."""
