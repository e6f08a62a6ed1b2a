"""Repository for task documents scoped to their owner."""

from __future__ import annotations

from beanie import PydanticObjectId

from ..models import Task
from .base import BaseRepository, parse_object_id


class TaskRepository(BaseRepository[Task]):
    """Every lookup is filtered by owner so foreign tasks look missing."""

    def __init__(self) -> None:
        super().__init__(Task)

    async def list_for_owner(self, owner_id: PydanticObjectId) -> list[Task]:
        """Return the owner's tasks, newest first."""
        return await Task.find(Task.owner_id == owner_id).sort("-created_at", "-_id").to_list()

    async def get_for_owner(self, owner_id: PydanticObjectId, task_id: object) -> Task | None:
        object_id = parse_object_id(task_id)
        if object_id is None:
            return None
        return await Task.find_one(Task.id == object_id, Task.owner_id == owner_id)
