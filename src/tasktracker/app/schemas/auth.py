"""Schemas describing authentication payloads."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, field_validator

from .user import UserPublic
from .validators import check_password, clean_email, clean_name, require_password


class RegisterRequest(BaseModel):
    """Incoming payload for registering a new user."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {"name": "Ann", "email": "ann@example.com", "password": "secret1"},
        }
    )

    name: str
    email: str
    password: str

    @field_validator("name", mode="before")
    @classmethod
    def _clean_name(cls, value: object) -> str:
        return clean_name(value)

    @field_validator("email", mode="before")
    @classmethod
    def _clean_email(cls, value: object) -> str:
        return clean_email(value)

    @field_validator("password", mode="before")
    @classmethod
    def _check_password(cls, value: object) -> str:
        return check_password(value)


class LoginRequest(BaseModel):
    """Credentials submitted to the login endpoint."""

    email: str
    password: str

    @field_validator("email", mode="before")
    @classmethod
    def _clean_email(cls, value: object) -> str:
        return clean_email(value)

    @field_validator("password", mode="before")
    @classmethod
    def _require_password(cls, value: object) -> str:
        return require_password(value)


class ProfileUpdateRequest(BaseModel):
    """Partial profile update; omitted fields stay unchanged."""

    name: str | None = None
    email: str | None = None
    password: str | None = None

    @field_validator("name", mode="before")
    @classmethod
    def _clean_name(cls, value: object) -> str | None:
        return None if value is None else clean_name(value)

    @field_validator("email", mode="before")
    @classmethod
    def _clean_email(cls, value: object) -> str | None:
        return None if value is None else clean_email(value)

    @field_validator("password", mode="before")
    @classmethod
    def _check_password(cls, value: object) -> str | None:
        return None if value is None else check_password(value)


class AuthResponse(BaseModel):
    """Authenticated user plus the bearer token minted for them."""

    user: UserPublic
    token: str


__all__ = [
    "AuthResponse",
    "LoginRequest",
    "ProfileUpdateRequest",
    "RegisterRequest",
]
