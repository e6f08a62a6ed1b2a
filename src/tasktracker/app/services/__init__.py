"""Domain services wrapping the repositories."""

from __future__ import annotations

from .auth import AuthService, IssuedSession
from .tasks import TaskService
from .users import UserService

__all__ = ["AuthService", "IssuedSession", "TaskService", "UserService"]
