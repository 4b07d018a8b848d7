"""Typed form records and their field constraint tables."""

import re
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from travel_admin.errors import ValidationError

_EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
MIN_PASSWORD_LENGTH = 8


@dataclass(frozen=True)
class FieldRule:
    """A single check applied to one field of a form."""

    field: str
    check: Callable[[Any, Any], bool]
    message: str


def _is_email(value: object, _form: object) -> bool:
    return isinstance(value, str) and bool(_EMAIL_PATTERN.match(value.strip()))


def _is_present(value: object, _form: object) -> bool:
    return isinstance(value, str) and bool(value.strip())


@dataclass(frozen=True)
class LoginForm:
    """Credentials submitted from the login screen."""

    email: str
    password: str


@dataclass(frozen=True)
class RegistrationForm:
    """Account details submitted from the registration screen."""

    username: str
    email: str
    password: str
    password2: str
    first_name: str
    last_name: str
    role: str = "user"

    def to_payload(self) -> dict[str, str]:
        return {
            "username": self.username.strip(),
            "email": self.email.strip(),
            "password": self.password,
            "password2": self.password2,
            "first_name": self.first_name.strip(),
            "last_name": self.last_name.strip(),
            "role": self.role,
        }


@dataclass(frozen=True)
class VerifyEmailForm:
    """Verification code submitted for an email address."""

    email: str
    code: str


LOGIN_RULES: tuple[FieldRule, ...] = (
    FieldRule("email", _is_email, "Enter a valid email address"),
    FieldRule("password", _is_present, "Password is required"),
)

REGISTRATION_RULES: tuple[FieldRule, ...] = (
    FieldRule("username", _is_present, "Username is required"),
    FieldRule("email", _is_email, "Enter a valid email address"),
    FieldRule(
        "password",
        lambda value, _form: len(value) >= MIN_PASSWORD_LENGTH,
        f"Password must be at least {MIN_PASSWORD_LENGTH} characters",
    ),
    FieldRule(
        "password2",
        lambda value, form: value == form.password,
        "Passwords do not match",
    ),
    FieldRule("first_name", _is_present, "First name is required"),
    FieldRule("last_name", _is_present, "Last name is required"),
)

VERIFY_EMAIL_RULES: tuple[FieldRule, ...] = (
    FieldRule("email", _is_email, "Enter a valid email address"),
    FieldRule(
        "code",
        lambda value, _form: value.strip().isdigit(),
        "Enter the numeric code from the email",
    ),
)


def validate_form(form: object, rules: tuple[FieldRule, ...]) -> dict[str, str]:
    """Return the first failing message per field; empty when the form is valid."""
    errors: dict[str, str] = {}
    for rule in rules:
        if rule.field in errors:
            continue
        if not rule.check(getattr(form, rule.field), form):
            errors[rule.field] = rule.message
    return errors


def first_error(errors: dict[str, str]) -> str | None:
    return next(iter(errors.values()), None)


def ensure_valid(form: object, rules: tuple[FieldRule, ...]) -> None:
    """Raise ValidationError with the first failing message, if any."""
    errors = validate_form(form, rules)
    if errors:
        raise ValidationError(first_error(errors), fields=errors)
