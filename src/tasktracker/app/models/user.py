"""User documents persisted in MongoDB."""

from __future__ import annotations

from datetime import datetime

from beanie import Document, Indexed
from pydantic import Field, field_validator

from .common import utcnow

NAME_MAX_LENGTH = 100


class User(Document):
    """Registered account; the hashed password never leaves the server."""

    name: str = Field(max_length=NAME_MAX_LENGTH)
    email: Indexed(str, unique=True)  # type: ignore[valid-type]
    hashed_password: str
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @field_validator("email", mode="before")
    @classmethod
    def _normalise_email(cls, value: object) -> str:
        return str(value or "").strip().lower()

    @field_validator("name", mode="before")
    @classmethod
    def _clean_name(cls, value: object) -> str:
        return str(value or "").strip()

    class Settings:
        name = "users"


__all__ = ["NAME_MAX_LENGTH", "User"]
