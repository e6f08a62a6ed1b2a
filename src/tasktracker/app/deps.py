"""Reusable FastAPI dependencies."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .core.config import Settings, get_settings
from .errors import AuthError
from .models import User
from .services import AuthService, TaskService

SettingsDependency = Annotated[Settings, Depends(get_settings)]

_bearer_scheme = HTTPBearer(auto_error=False)


def get_auth_service(settings: SettingsDependency) -> AuthService:
    return AuthService(settings)


def get_task_service() -> TaskService:
    return TaskService()


AuthServiceDependency = Annotated[AuthService, Depends(get_auth_service)]
TaskServiceDependency = Annotated[TaskService, Depends(get_task_service)]


async def get_current_user(
    service: AuthServiceDependency,
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer_scheme),
) -> User:
    """Resolve the bearer token to a stored user before any handler runs."""

    if credentials is None or not credentials.credentials:
        raise AuthError("Not authorized, no token.")
    return await service.authenticate(credentials.credentials)


CurrentUserDependency = Annotated[User, Depends(get_current_user)]


__all__ = [
    "AuthServiceDependency",
    "CurrentUserDependency",
    "SettingsDependency",
    "TaskServiceDependency",
    "get_auth_service",
    "get_current_user",
    "get_task_service",
]
