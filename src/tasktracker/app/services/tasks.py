"""Owner-scoped task operations on top of the task repository."""

from __future__ import annotations

import logging
from typing import Any, Mapping

from beanie import PydanticObjectId

from ..errors import NotFoundError, ValidationError
from ..models import Task, TaskStatus, utcnow
from ..repositories import TaskRepository, UserRepository
from ..schemas.validators import clean_description, clean_title
from .checks import checked

logger = logging.getLogger(__name__)

_UPDATABLE_FIELDS = ("title", "description", "status")


class TaskService:
    """Owner-scoped task operations; foreign ids behave as missing ones."""

    def __init__(
        self,
        repository: TaskRepository | None = None,
        user_repository: UserRepository | None = None,
    ) -> None:
        self._repository = repository or TaskRepository()
        self._user_repository = user_repository or UserRepository()

    async def list_tasks(self, owner_id: PydanticObjectId) -> list[Task]:
        """Return the owner's tasks, newest-created first."""
        return await self._repository.list_for_owner(owner_id)

    async def create_task(
        self,
        *,
        owner_id: PydanticObjectId,
        title: str,
        description: str | None = None,
    ) -> Task:
        """Create a pending task belonging to ``owner_id``."""
        title = checked("title", clean_title, title)
        description = checked("description", clean_description, description)
        owner = await self._user_repository.get(owner_id)
        if owner is None:
            raise NotFoundError("User not found.")
        task = Task(owner_id=owner_id, title=title, description=description)
        await self._repository.add(task)
        logger.info("Task created", extra={"task_id": str(task.id), "owner_id": str(owner_id)})
        return task

    async def get_task(self, owner_id: PydanticObjectId, task_id: object) -> Task:
        task = await self._repository.get_for_owner(owner_id, task_id)
        if task is None:
            raise NotFoundError("Task not found.")
        return task

    async def update_task(
        self,
        owner_id: PydanticObjectId,
        task_id: object,
        changes: Mapping[str, Any],
    ) -> Task:
        """Apply a partial update; absent keys are left untouched."""
        unknown = sorted(set(changes) - set(_UPDATABLE_FIELDS))
        if unknown:
            raise ValidationError.for_field(unknown[0], "Field cannot be updated")
        task = await self.get_task(owner_id, task_id)
        if "title" in changes:
            task.title = checked("title", clean_title, changes["title"])
        if "description" in changes:
            task.description = checked("description", clean_description, changes["description"])
        if "status" in changes:
            task.status = checked("status", _coerce_status, changes["status"])
        task.updated_at = utcnow()
        await self._repository.save(task)
        return task

    async def delete_task(self, owner_id: PydanticObjectId, task_id: object) -> None:
        task = await self.get_task(owner_id, task_id)
        await self._repository.delete(task)
        logger.info("Task deleted", extra={"task_id": str(task_id), "owner_id": str(owner_id)})


def _coerce_status(value: object) -> TaskStatus:
    try:
        return TaskStatus(value)
    except ValueError as exc:
        raise ValueError("Status must be pending or completed") from exc


__all__ = ["TaskService"]
