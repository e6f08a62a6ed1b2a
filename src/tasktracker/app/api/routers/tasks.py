"""Task CRUD routes scoped to the authenticated owner."""

from __future__ import annotations

from fastapi import APIRouter, status

from ...deps import CurrentUserDependency, TaskServiceDependency
from ...schemas import TaskCreate, TaskRead, TaskUpdate

router = APIRouter(prefix="/tasks", tags=["tasks"])


@router.get("", response_model=list[TaskRead], summary="List the caller's tasks, newest first")
async def list_tasks(current_user: CurrentUserDependency, service: TaskServiceDependency) -> list[TaskRead]:
    tasks = await service.list_tasks(current_user.id)
    return [TaskRead.model_validate(task) for task in tasks]


@router.post(
    "",
    response_model=TaskRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create a task",
)
async def create_task(
    payload: TaskCreate,
    current_user: CurrentUserDependency,
    service: TaskServiceDependency,
) -> TaskRead:
    task = await service.create_task(
        owner_id=current_user.id,
        title=payload.title,
        description=payload.description,
    )
    return TaskRead.model_validate(task)


@router.put("/{task_id}", response_model=TaskRead, summary="Partially update a task")
async def update_task(
    task_id: str,
    payload: TaskUpdate,
    current_user: CurrentUserDependency,
    service: TaskServiceDependency,
) -> TaskRead:
    task = await service.update_task(current_user.id, task_id, payload.changes())
    return TaskRead.model_validate(task)


@router.delete("/{task_id}", summary="Delete a task")
async def delete_task(
    task_id: str,
    current_user: CurrentUserDependency,
    service: TaskServiceDependency,
) -> dict[str, str]:
    await service.delete_task(current_user.id, task_id)
    return {}
