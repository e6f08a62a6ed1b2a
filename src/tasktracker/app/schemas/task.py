"""Task-related Pydantic schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator, model_validator

from ..models import TaskStatus, ensure_utc
from .validators import clean_description, clean_title

TASK_READ_EXAMPLE = {
    "id": "665f1c2ab3e4d5f6a7b8c9d0",
    "title": "Buy milk",
    "description": None,
    "status": TaskStatus.PENDING.value,
    "createdAt": "2024-06-04T12:00:00+00:00",
}


class TaskCreate(BaseModel):
    """Payload for creating a new task."""

    model_config = ConfigDict(
        json_schema_extra={"example": {"title": "Buy milk", "description": "Two litres"}},
    )

    title: str
    description: str | None = None

    @field_validator("title", mode="before")
    @classmethod
    def _clean_title(cls, value: object) -> str:
        return clean_title(value)

    @field_validator("description", mode="before")
    @classmethod
    def _clean_description(cls, value: object) -> str | None:
        return clean_description(value)


class TaskUpdate(BaseModel):
    """Payload for partially updating an existing task."""

    model_config = ConfigDict(
        json_schema_extra={"example": {"status": TaskStatus.COMPLETED.value}},
    )

    title: str | None = None
    description: str | None = None
    status: TaskStatus | None = None

    @field_validator("title", mode="before")
    @classmethod
    def _clean_title(cls, value: object) -> str:
        return clean_title(value)

    @field_validator("description", mode="before")
    @classmethod
    def _clean_description(cls, value: object) -> str | None:
        return clean_description(value)

    @model_validator(mode="after")
    def _ensure_payload_not_empty(self) -> "TaskUpdate":
        if not self.model_fields_set:
            raise ValueError("At least one field must be provided for update.")
        return self

    def changes(self) -> dict[str, object]:
        """Return only the fields the caller actually sent."""
        return self.model_dump(exclude_unset=True)


class TaskRead(BaseModel):
    """Public representation of a task."""

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        json_schema_extra={"example": TASK_READ_EXAMPLE},
    )

    id: str
    title: str
    description: str | None = None
    status: TaskStatus
    created_at: datetime = Field(serialization_alias="createdAt")

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_id(cls, value: object) -> str:
        return str(value)

    @field_serializer("created_at")
    def _serialise_created_at(self, value: datetime) -> str:
        return ensure_utc(value).isoformat()


__all__ = ["TASK_READ_EXAMPLE", "TaskCreate", "TaskRead", "TaskUpdate"]
