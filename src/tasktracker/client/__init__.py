"""Async client for the task tracker: session lifecycle and optimistic task view."""

from __future__ import annotations

from .api import TaskTrackerAPI
from .config import ClientSettings, get_client_settings
from .errors import (
    AuthError,
    ClientError,
    ConflictError,
    NotFoundError,
    ServerError,
    TransportError,
    ValidationError,
)
from .models import AuthResult, TaskItem, TaskStats, TaskStatus, UserInfo
from .notifications import Notification, NotificationLevel, Notifier
from .session import SessionContext, SessionState
from .store import OptimisticTaskStore
from .token_store import FileTokenStore, MemoryTokenStore, TokenStore, token_store_for

__all__ = [
    "AuthError",
    "AuthResult",
    "ClientError",
    "ClientSettings",
    "ConflictError",
    "FileTokenStore",
    "MemoryTokenStore",
    "NotFoundError",
    "Notification",
    "NotificationLevel",
    "Notifier",
    "OptimisticTaskStore",
    "ServerError",
    "SessionContext",
    "SessionState",
    "TaskItem",
    "TaskStats",
    "TaskStatus",
    "TaskTrackerAPI",
    "TokenStore",
    "TransportError",
    "UserInfo",
    "ValidationError",
    "get_client_settings",
    "token_store_for",
]
