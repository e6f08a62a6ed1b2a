"""Task documents owned by a single user."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from beanie import Document, PydanticObjectId
from pydantic import Field
from pymongo import ASCENDING, DESCENDING, IndexModel

from .common import utcnow

TITLE_MAX_LENGTH = 200
DESCRIPTION_MAX_LENGTH = 1000


class TaskStatus(str, Enum):
    """Lifecycle states for a task."""

    PENDING = "pending"
    COMPLETED = "completed"


class Task(Document):
    """A to-do item; ``owner_id`` is fixed at creation."""

    owner_id: PydanticObjectId
    title: str = Field(min_length=1, max_length=TITLE_MAX_LENGTH)
    description: str | None = Field(default=None, max_length=DESCRIPTION_MAX_LENGTH)
    status: TaskStatus = Field(default=TaskStatus.PENDING)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    class Settings:
        name = "tasks"
        indexes = [
            IndexModel(
                [("owner_id", ASCENDING), ("created_at", DESCENDING)],
                name="tasks_owner_created_at",
            ),
            IndexModel(
                [("owner_id", ASCENDING), ("status", ASCENDING)],
                name="tasks_owner_status",
            ),
        ]


__all__ = ["DESCRIPTION_MAX_LENGTH", "TITLE_MAX_LENGTH", "Task", "TaskStatus"]
