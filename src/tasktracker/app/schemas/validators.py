"""Field rules shared by request schemas and services.

Each helper returns the cleaned value or raises ``ValueError`` carrying the
message shown to the user.
"""

from __future__ import annotations

from email_validator import EmailNotValidError, validate_email

from ..models import DESCRIPTION_MAX_LENGTH, NAME_MAX_LENGTH, TITLE_MAX_LENGTH

NAME_MIN_LENGTH = 2
PASSWORD_MIN_LENGTH = 6


def clean_name(value: object) -> str:
    name = str(value or "").strip()
    if len(name) < NAME_MIN_LENGTH:
        raise ValueError("Name must be at least 2 characters")
    if len(name) > NAME_MAX_LENGTH:
        raise ValueError("Name must be at most 100 characters")
    return name


def clean_email(value: object) -> str:
    raw = str(value or "").strip()
    try:
        result = validate_email(raw, check_deliverability=False)
    except EmailNotValidError as exc:
        raise ValueError("Invalid email address") from exc
    return result.normalized.lower()


def check_password(value: object) -> str:
    password = "" if value is None else str(value)
    if len(password) < PASSWORD_MIN_LENGTH:
        raise ValueError("Password must be at least 6 characters")
    return password


def require_password(value: object) -> str:
    password = "" if value is None else str(value)
    if not password:
        raise ValueError("Password is required")
    return password


def clean_title(value: object) -> str:
    title = str(value or "").strip()
    if not title or len(title) > TITLE_MAX_LENGTH:
        raise ValueError("Title must be 1-200 characters")
    return title


def clean_description(value: object) -> str | None:
    if value is None:
        return None
    description = str(value).strip()
    if len(description) > DESCRIPTION_MAX_LENGTH:
        raise ValueError("Description too long")
    return description


__all__ = [
    "NAME_MIN_LENGTH",
    "PASSWORD_MIN_LENGTH",
    "check_password",
    "clean_description",
    "clean_email",
    "clean_name",
    "clean_title",
    "require_password",
]
