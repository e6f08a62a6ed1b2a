"""Database repositories for encapsulating persistence logic."""

from __future__ import annotations

from .base import BaseRepository, parse_object_id
from .tasks import TaskRepository
from .users import UserRepository

__all__ = ["BaseRepository", "TaskRepository", "UserRepository", "parse_object_id"]
