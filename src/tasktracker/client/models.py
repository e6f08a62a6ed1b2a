"""Wire models shared by the client components."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

PLACEHOLDER_PREFIX = "pending-"


class TaskStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"

    def toggled(self) -> "TaskStatus":
        return TaskStatus.COMPLETED if self is TaskStatus.PENDING else TaskStatus.PENDING


class UserInfo(BaseModel):
    """The authenticated identity as returned by the server."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str
    name: str
    email: str


class AuthResult(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    user: UserInfo
    token: str


class TaskItem(BaseModel):
    """A task entry; instances are immutable so snapshots stay exact."""

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    id: str
    title: str
    description: str | None = None
    status: TaskStatus = TaskStatus.PENDING
    created_at: datetime | None = Field(default=None, alias="createdAt")

    @property
    def is_placeholder(self) -> bool:
        return is_placeholder_id(self.id)


class TaskStats(BaseModel):
    model_config = ConfigDict(frozen=True)

    total: int = 0
    completed: int = 0
    pending: int = 0
    completion_rate: int = 0


def is_placeholder_id(task_id: str) -> bool:
    return task_id.startswith(PLACEHOLDER_PREFIX)


__all__ = [
    "PLACEHOLDER_PREFIX",
    "AuthResult",
    "TaskItem",
    "TaskStats",
    "TaskStatus",
    "UserInfo",
    "is_placeholder_id",
]
