"""User-facing Pydantic schemas."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, field_validator


class UserPublic(BaseModel):
    """Minimal public representation of a user."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    email: str

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_id(cls, value: object) -> str:
        return str(value)


class UserEnvelope(BaseModel):
    """Response wrapping the current user."""

    user: UserPublic


__all__ = ["UserEnvelope", "UserPublic"]
