"""Document models for the task tracker."""

from __future__ import annotations

from .common import ensure_utc, utcnow
from .task import DESCRIPTION_MAX_LENGTH, TITLE_MAX_LENGTH, Task, TaskStatus
from .user import NAME_MAX_LENGTH, User

__all__ = [
    "DESCRIPTION_MAX_LENGTH",
    "NAME_MAX_LENGTH",
    "TITLE_MAX_LENGTH",
    "Task",
    "TaskStatus",
    "User",
    "ensure_utc",
    "utcnow",
]
