"""Local form checks run before any credentials leave the client."""

from __future__ import annotations

from typing import TypeVar

from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel, field_validator
from pydantic import ValidationError as PydanticValidationError

from .errors import ValidationError

FormType = TypeVar("FormType", bound=BaseModel)


class LoginForm(BaseModel):
    email: str
    password: str

    @field_validator("email", mode="before")
    @classmethod
    def _check_email(cls, value: object) -> str:
        return _normalise_email(value)

    @field_validator("password", mode="before")
    @classmethod
    def _check_password(cls, value: object) -> str:
        password = "" if value is None else str(value)
        if not password:
            raise ValueError("Password is required")
        return password


class RegisterForm(BaseModel):
    name: str
    email: str
    password: str

    @field_validator("name", mode="before")
    @classmethod
    def _check_name(cls, value: object) -> str:
        name = str(value or "").strip()
        if len(name) < 2:
            raise ValueError("Name must be at least 2 characters")
        if len(name) > 100:
            raise ValueError("Name must be at most 100 characters")
        return name

    @field_validator("email", mode="before")
    @classmethod
    def _check_email(cls, value: object) -> str:
        return _normalise_email(value)

    @field_validator("password", mode="before")
    @classmethod
    def _check_password(cls, value: object) -> str:
        password = "" if value is None else str(value)
        if len(password) < 6:
            raise ValueError("Password must be at least 6 characters")
        return password


def _normalise_email(value: object) -> str:
    try:
        result = validate_email(str(value or "").strip(), check_deliverability=False)
    except EmailNotValidError as exc:
        raise ValueError("Invalid email address") from exc
    return result.normalized.lower()


def _field_errors(exc: PydanticValidationError) -> list[dict[str, str]]:
    errors: list[dict[str, str]] = []
    for error in exc.errors():
        field = ".".join(str(part) for part in error.get("loc", ())) or "form"
        message = str(error.get("msg", "Invalid value."))
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        errors.append({"field": field, "msg": message})
    return errors


def validate_form(form_type: type[FormType], **values: object) -> FormType:
    """Build ``form_type`` or raise a client ``ValidationError`` naming each bad field."""
    try:
        return form_type(**values)
    except PydanticValidationError as exc:
        errors = _field_errors(exc)
        raise ValidationError(errors[0]["msg"], details={"errors": errors}) from exc


__all__ = ["LoginForm", "RegisterForm", "validate_form"]
