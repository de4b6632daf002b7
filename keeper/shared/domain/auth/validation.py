"""Credential validation rules.

Two consumers share the same predicates:

- `check_login` / `check_signup` stop at the first violation and raise
  `ValidationError`. Session operations call these before touching state.
- `validate_login_form` / `validate_signup_form` collect every violation
  keyed by field name so a form can show all errors at once.

Login only requires a non-empty password; the length floor applies when an
account is created.
"""

from __future__ import annotations

from typing import Dict

from .errors import ValidationError
from .models import LoginCredentials, SignupCredentials

MIN_PASSWORD_LENGTH = 6
MIN_NAME_LENGTH = 2

FieldErrors = Dict[str, str]


def is_blank(value: str | None) -> bool:
    return value is None or not value.strip()


def is_well_formed_email(email: str | None) -> bool:
    return not is_blank(email) and "@" in email


def meets_password_floor(password: str | None) -> bool:
    return password is not None and len(password) >= MIN_PASSWORD_LENGTH


def meets_name_floor(name: str | None) -> bool:
    return name is not None and len(name.strip()) >= MIN_NAME_LENGTH


def check_login(credentials: LoginCredentials) -> None:
    """Raise ValidationError on the first problem with login credentials."""
    if is_blank(credentials.email) or not credentials.password:
        raise ValidationError("Email and password are required")
    if not is_well_formed_email(credentials.email):
        raise ValidationError("Please enter a valid email")


def check_signup(credentials: SignupCredentials) -> None:
    """Raise ValidationError on the first problem with signup credentials."""
    if is_blank(credentials.email) or not credentials.password or is_blank(credentials.name):
        raise ValidationError("All fields are required")
    if not is_well_formed_email(credentials.email):
        raise ValidationError("Please enter a valid email")
    if not meets_password_floor(credentials.password):
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
    if not meets_name_floor(credentials.name):
        raise ValidationError(f"Name must be at least {MIN_NAME_LENGTH} characters")


def _email_error(email: str) -> str | None:
    if is_blank(email):
        return "Email is required"
    if not is_well_formed_email(email):
        return "Please enter a valid email address"
    return None


def _password_error(password: str) -> str | None:
    if not password:
        return "Password is required"
    if not meets_password_floor(password):
        return f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
    return None


def _name_error(name: str) -> str | None:
    if is_blank(name):
        return "Name is required"
    if not meets_name_floor(name):
        return f"Name must be at least {MIN_NAME_LENGTH} characters"
    return None


def _collect(**messages: str | None) -> FieldErrors:
    return {field: message for field, message in messages.items() if message}


def validate_login_form(email: str, password: str) -> FieldErrors:
    """Return every login form error; an empty dict means the form is valid."""
    return _collect(email=_email_error(email), password=_password_error(password))


def validate_signup_form(name: str, email: str, password: str) -> FieldErrors:
    """Return every signup form error; an empty dict means the form is valid."""
    return _collect(
        name=_name_error(name),
        email=_email_error(email),
        password=_password_error(password),
    )
