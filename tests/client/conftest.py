from __future__ import annotations

import asyncio
from collections import defaultdict
from collections.abc import AsyncIterator, Awaitable, Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from itertools import count
from typing import Any

import pytest

from tasktracker.client import (
    AuthResult,
    MemoryTokenStore,
    Notifier,
    OptimisticTaskStore,
    SessionContext,
    TaskItem,
    TaskStatus,
    UserInfo,
)

ANN = UserInfo(id="u-ann", name="Ann", email="ann@example.com")


@dataclass(slots=True)
class FakeCall:
    name: str
    kwargs: dict[str, Any]
    future: asyncio.Future = field(repr=False)

    def resolve(self, value: Any = None) -> None:
        self.future.set_result(value)

    def fail(self, error: BaseException) -> None:
        self.future.set_exception(error)


class FakeTaskAPI:
    """Records every call; each answer is supplied by the test through its future."""

    def __init__(self) -> None:
        self.calls: list[FakeCall] = []
        self._replies: dict[str, list[Any]] = defaultdict(list)

    def reply(self, name: str, value: Any) -> None:
        """Answer the next ``name`` call immediately with ``value`` (raised if an exception)."""
        self._replies[name].append(value)

    def pending(self, name: str | None = None) -> list[FakeCall]:
        return [call for call in self.calls if not call.future.done() and (name is None or call.name == name)]

    def called(self, name: str) -> list[FakeCall]:
        return [call for call in self.calls if call.name == name]

    async def _call(self, name: str, /, **kwargs: Any) -> Any:
        call = FakeCall(name=name, kwargs=kwargs, future=asyncio.get_running_loop().create_future())
        self.calls.append(call)
        if self._replies[name]:
            value = self._replies[name].pop(0)
            if isinstance(value, BaseException):
                call.fail(value)
            else:
                call.resolve(value)
        return await call.future

    async def register(self, *, name: str, email: str, password: str) -> AuthResult:
        return await self._call("register", name=name, email=email, password=password)

    async def login(self, *, email: str, password: str) -> AuthResult:
        return await self._call("login", email=email, password=password)

    async def me(self, token: str) -> UserInfo:
        return await self._call("me", token=token)

    async def update_profile(self, token: str, **fields: Any) -> UserInfo:
        return await self._call("update_profile", token=token, **fields)

    async def list_tasks(self, token: str) -> list[TaskItem]:
        return await self._call("list_tasks", token=token)

    async def create_task(self, token: str, *, title: str, description: str | None = None) -> TaskItem:
        return await self._call("create_task", token=token, title=title, description=description)

    async def update_task(self, token: str, task_id: str, **fields: Any) -> TaskItem:
        return await self._call("update_task", token=token, task_id=task_id, **fields)

    async def delete_task(self, token: str, task_id: str) -> None:
        return await self._call("delete_task", token=token, task_id=task_id)


async def _flush() -> None:
    for _ in range(5):
        await asyncio.sleep(0)


@pytest.fixture()
def flush() -> Callable[[], Awaitable[None]]:
    return _flush


@pytest.fixture()
def fake_api() -> FakeTaskAPI:
    return FakeTaskAPI()


@pytest.fixture()
def notifier() -> Notifier:
    return Notifier()


@pytest.fixture()
def token_store() -> MemoryTokenStore:
    return MemoryTokenStore()


@pytest.fixture()
def session(fake_api: FakeTaskAPI, token_store: MemoryTokenStore, notifier: Notifier) -> SessionContext:
    return SessionContext(fake_api, token_store=token_store, notifier=notifier)  # type: ignore[arg-type]


@pytest.fixture()
async def signed_in(session: SessionContext, fake_api: FakeTaskAPI, notifier: Notifier) -> SessionContext:
    fake_api.reply("login", AuthResult(user=ANN, token="token-ann"))
    await session.login("ann@example.com", "secret1")
    notifier.pop_all()
    return session


@pytest.fixture()
def make_task() -> Callable[..., TaskItem]:
    ids = count(1)
    base = datetime(2024, 6, 1, tzinfo=timezone.utc)

    def _factory(
        title: str = "Task",
        *,
        task_id: str | None = None,
        status: TaskStatus = TaskStatus.PENDING,
        description: str | None = None,
    ) -> TaskItem:
        number = next(ids)
        return TaskItem(
            id=task_id or f"t{number}",
            title=title,
            description=description,
            status=status,
            created_at=base + timedelta(minutes=number),
        )

    return _factory


@pytest.fixture()
async def store(signed_in: SessionContext) -> AsyncIterator[OptimisticTaskStore]:
    task_store = OptimisticTaskStore(signed_in)
    yield task_store
    task_store.close()


@pytest.fixture()
async def seeded_store(
    store: OptimisticTaskStore,
    fake_api: FakeTaskAPI,
    make_task: Callable[..., TaskItem],
) -> OptimisticTaskStore:
    """A store showing three confirmed tasks: c (newest), b, a."""
    fake_api.reply(
        "list_tasks",
        [make_task("Gamma", task_id="c"), make_task("Beta", task_id="b"), make_task("Alpha", task_id="a")],
    )
    await store.refresh()
    return store
