"""Optimistic task list with per-field reconciliation."""

from __future__ import annotations

import asyncio
import itertools
import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Literal
from uuid import uuid4

from .errors import AuthError, ClientError
from .models import PLACEHOLDER_PREFIX, TaskItem, TaskStats, TaskStatus
from .session import SessionContext, SessionState

logger = logging.getLogger(__name__)

StatusFilter = Literal["all", "pending", "completed"]
StoreListener = Callable[["OptimisticTaskStore"], None]


@dataclass(slots=True)
class _Mutation:
    """One in-flight change to a single field of a task."""

    seq: int
    field: str
    snapshot: Any
    value: Any
    settled: bool = False


@dataclass(slots=True)
class _Removal:
    """A task hidden by an in-flight delete, with its original neighbours."""

    entry: TaskItem
    index: int
    before: str | None
    after: str | None


@dataclass(slots=True)
class _EntryLog:
    fields: dict[str, list[_Mutation]] = field(default_factory=dict)


class OptimisticTaskStore:
    """The task view shown to the user.

    Every mutation changes the view immediately, then reconciles with the
    server's answer. For each (task, field) pair the most recently issued
    mutation decides the final value: an older response never overwrites
    a newer optimistic value, and an older failure hands its snapshot to
    the next in-flight mutation instead of touching the view.

    Mutation methods are synchronous up to the optimistic change and return
    the scheduled ``asyncio.Task``, or ``None`` when rejected locally.
    Failures are rolled back and reported through the session notifier;
    they never raise into the caller.
    """

    def __init__(self, session: SessionContext) -> None:
        self._session = session
        self._api = session.api
        self._notifier = session.notifier
        self._entries: dict[str, TaskItem] = {}
        self._order: list[str] = []
        self._logs: dict[str, _EntryLog] = {}
        self._removed: dict[str, _Removal] = {}
        self._sequence = itertools.count(1)
        self._generation = 0
        self._inflight: set[asyncio.Task[None]] = set()
        self._listeners: list[StoreListener] = []
        self._owner_id = session.user.id if session.user else None
        self._unsubscribe = session.subscribe(self._on_session_change)

    # Views

    @property
    def tasks(self) -> list[TaskItem]:
        return [self._entries[task_id] for task_id in self._order]

    def get(self, task_id: str) -> TaskItem | None:
        return self._entries.get(task_id)

    def __len__(self) -> int:
        return len(self._order)

    def __contains__(self, task_id: object) -> bool:
        return task_id in self._entries

    def is_busy(self, task_id: str) -> bool:
        """Whether any mutation of ``task_id`` is still awaiting the server."""
        if task_id in self._removed:
            return True
        entry = self._entries.get(task_id)
        if entry is not None and entry.is_placeholder:
            return True
        log = self._logs.get(task_id)
        return bool(log and any(not m.settled for ops in log.fields.values() for m in ops))

    def filter(self, query: str = "", status: StatusFilter = "all") -> list[TaskItem]:
        """Tasks whose title contains ``query`` (case-insensitive) and match ``status``."""
        needle = query.strip().lower()
        matches = []
        for task in self.tasks:
            if needle and needle not in task.title.lower():
                continue
            if status != "all" and task.status.value != status:
                continue
            matches.append(task)
        return matches

    def stats(self) -> TaskStats:
        tasks = self.tasks
        total = len(tasks)
        completed = sum(1 for task in tasks if task.status is TaskStatus.COMPLETED)
        rate = math.floor(completed * 100 / total + 0.5) if total else 0
        return TaskStats(total=total, completed=completed, pending=total - completed, completion_rate=rate)

    def subscribe(self, listener: StoreListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def close(self) -> None:
        """Stop following the session."""
        self._unsubscribe()

    # Lifecycle

    def clear(self) -> None:
        """Drop every entry; responses to requests already sent are ignored."""
        self._entries.clear()
        self._order.clear()
        self._logs.clear()
        self._removed.clear()
        self._generation += 1
        self._changed()

    async def wait_idle(self) -> None:
        """Wait until every issued mutation has been reconciled."""
        while self._inflight:
            await asyncio.gather(*list(self._inflight))

    async def refresh(self) -> list[TaskItem]:
        """Reload confirmed tasks from the server, keeping placeholders on top."""
        token = self._token()
        if token is None:
            return self.tasks
        generation = self._generation
        try:
            fetched = await self._api.list_tasks(token)
        except ClientError as exc:
            if generation == self._generation:
                self._report(exc)
            return self.tasks
        if generation != self._generation:
            return self.tasks

        placeholders = [task_id for task_id in self._order if task_id.startswith(PLACEHOLDER_PREFIX)]
        entries = {task_id: self._entries[task_id] for task_id in placeholders}
        order = list(placeholders)
        for item in fetched:
            if item.id in self._removed or item.id in entries:
                continue
            entries[item.id] = self._overlay_inflight(item)
            order.append(item.id)
        self._entries = entries
        self._order = order
        self._changed()
        return self.tasks

    # Mutations

    def create(self, title: str, description: str | None = None) -> asyncio.Task[None] | None:
        cleaned = (title or "").strip()
        if not cleaned:
            return None
        token = self._token()
        if token is None:
            return None

        placeholder = TaskItem(
            id=f"{PLACEHOLDER_PREFIX}{uuid4().hex}",
            title=cleaned,
            description=description,
            status=TaskStatus.PENDING,
            created_at=datetime.now(timezone.utc),
        )
        self._entries[placeholder.id] = placeholder
        self._order.insert(0, placeholder.id)
        self._changed()
        return self._spawn(self._settle_create(placeholder.id, token, cleaned, description))

    def toggle(self, task_id: str) -> asyncio.Task[None] | None:
        entry, token = self._mutable(task_id)
        if entry is None or token is None:
            return None
        status = entry.status.toggled()
        mutation = self._begin(task_id, "status", entry.status, status)
        return self._spawn(
            self._settle_field(
                task_id,
                mutation,
                lambda: self._api.update_task(token, task_id, status=status),
            )
        )

    def rename(self, task_id: str, new_title: str) -> asyncio.Task[None] | None:
        cleaned = (new_title or "").strip()
        if not cleaned:
            return None
        entry, token = self._mutable(task_id)
        if entry is None or token is None or cleaned == entry.title:
            return None
        mutation = self._begin(task_id, "title", entry.title, cleaned)
        return self._spawn(
            self._settle_field(
                task_id,
                mutation,
                lambda: self._api.update_task(token, task_id, title=cleaned),
            )
        )

    def delete(self, task_id: str) -> asyncio.Task[None] | None:
        entry, token = self._mutable(task_id)
        if entry is None or token is None:
            return None
        index = self._order.index(task_id)
        before = self._order[index - 1] if index > 0 else None
        after = self._order[index + 1] if index + 1 < len(self._order) else None
        self._order.pop(index)
        del self._entries[task_id]
        self._removed[task_id] = _Removal(entry=entry, index=index, before=before, after=after)
        self._changed()
        return self._spawn(self._settle_delete(task_id, token))

    # Reconciliation

    async def _settle_create(
        self,
        placeholder_id: str,
        token: str,
        title: str,
        description: str | None,
    ) -> None:
        generation = self._generation
        try:
            created = await self._api.create_task(token, title=title, description=description)
        except ClientError as exc:
            if generation != self._generation:
                return
            self._drop_placeholder(placeholder_id)
            logger.info("Create rolled back", extra={"placeholder_id": placeholder_id})
            self._report(exc)
            return
        if generation != self._generation or placeholder_id not in self._entries:
            return

        index = self._order.index(placeholder_id)
        del self._entries[placeholder_id]
        if created.id in self._entries:
            self._order.pop(index)
        else:
            self._order[index] = created.id
        self._entries[created.id] = created
        self._changed()

    async def _settle_field(
        self,
        task_id: str,
        mutation: _Mutation,
        call: Callable[[], Awaitable[TaskItem]],
    ) -> None:
        generation = self._generation
        try:
            result = await call()
        except ClientError as exc:
            if generation != self._generation:
                return
            self._field_failed(task_id, mutation)
            self._report(exc)
            return
        if generation != self._generation:
            return
        self._field_succeeded(task_id, mutation, getattr(result, mutation.field))

    async def _settle_delete(self, task_id: str, token: str) -> None:
        generation = self._generation
        try:
            await self._api.delete_task(token, task_id)
        except ClientError as exc:
            if generation != self._generation:
                return
            removal = self._removed.pop(task_id, None)
            if removal is not None:
                self._reinsert(task_id, removal)
                logger.info("Delete rolled back", extra={"task_id": task_id})
            self._report(exc)
            return
        if generation != self._generation:
            return
        self._removed.pop(task_id, None)
        self._logs.pop(task_id, None)

    def _begin(self, task_id: str, field_name: str, snapshot: Any, value: Any) -> _Mutation:
        mutation = _Mutation(seq=next(self._sequence), field=field_name, snapshot=snapshot, value=value)
        log = self._logs.setdefault(task_id, _EntryLog())
        log.fields.setdefault(field_name, []).append(mutation)
        self._write_field(task_id, field_name, value)
        return mutation

    def _field_failed(self, task_id: str, mutation: _Mutation) -> None:
        ops = self._field_ops(task_id, mutation.field)
        if mutation not in ops:
            return
        position = ops.index(mutation)
        newer = ops[position + 1] if position + 1 < len(ops) else None
        ops.remove(mutation)
        if newer is None:
            self._write_field(task_id, mutation.field, mutation.snapshot)
            logger.info("Field rolled back", extra={"task_id": task_id, "field": mutation.field})
        elif not newer.settled:
            newer.snapshot = mutation.snapshot
        self._prune(task_id, mutation.field)

    def _field_succeeded(self, task_id: str, mutation: _Mutation, server_value: Any) -> None:
        ops = self._field_ops(task_id, mutation.field)
        if mutation not in ops:
            return
        mutation.settled = True
        if ops[-1] is mutation:
            self._write_field(task_id, mutation.field, server_value)
        self._prune(task_id, mutation.field)

    def _field_ops(self, task_id: str, field_name: str) -> list[_Mutation]:
        log = self._logs.get(task_id)
        if log is None:
            return []
        return log.fields.get(field_name, [])

    def _prune(self, task_id: str, field_name: str) -> None:
        log = self._logs.get(task_id)
        if log is None:
            return
        ops = log.fields.get(field_name)
        if ops is not None and all(m.settled for m in ops):
            del log.fields[field_name]
        if not log.fields:
            del self._logs[task_id]

    def _write_field(self, task_id: str, field_name: str, value: Any) -> None:
        if task_id in self._entries:
            self._entries[task_id] = self._entries[task_id].model_copy(update={field_name: value})
            self._changed()
        elif task_id in self._removed:
            removal = self._removed[task_id]
            removal.entry = removal.entry.model_copy(update={field_name: value})

    def _overlay_inflight(self, item: TaskItem) -> TaskItem:
        log = self._logs.get(item.id)
        current = self._entries.get(item.id)
        if log is None or current is None:
            return item
        pending = {
            name: getattr(current, name)
            for name, ops in log.fields.items()
            if any(not m.settled for m in ops)
        }
        return item.model_copy(update=pending) if pending else item

    def _drop_placeholder(self, placeholder_id: str) -> None:
        if placeholder_id in self._entries:
            del self._entries[placeholder_id]
            self._order.remove(placeholder_id)
            self._changed()

    def _reinsert(self, task_id: str, removal: _Removal) -> None:
        if removal.after is not None and removal.after in self._entries:
            position = self._order.index(removal.after)
        elif removal.before is not None and removal.before in self._entries:
            position = self._order.index(removal.before) + 1
        else:
            position = min(removal.index, len(self._order))
        self._order.insert(position, task_id)
        self._entries[task_id] = removal.entry
        self._changed()

    # Helpers

    def _token(self) -> str | None:
        try:
            return self._session.require_token()
        except AuthError:
            logger.debug("Task mutation ignored while signed out")
            return None

    def _mutable(self, task_id: str) -> tuple[TaskItem | None, str | None]:
        entry = self._entries.get(task_id)
        if entry is None:
            return None, None
        if entry.is_placeholder:
            logger.debug("Mutation rejected for unsaved task", extra={"task_id": task_id})
            return None, None
        return entry, self._token()

    def _spawn(self, coro: Awaitable[None]) -> asyncio.Task[None]:
        task = asyncio.ensure_future(coro)
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)
        return task

    def _report(self, exc: ClientError) -> None:
        self._notifier.error(exc.message)
        if isinstance(exc, AuthError):
            self._session.invalidate()

    def _changed(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    def _on_session_change(self, session: SessionContext) -> None:
        if session.state is SessionState.AUTHENTICATED and session.user is not None:
            if self._owner_id is not None and self._owner_id != session.user.id:
                self.clear()
            self._owner_id = session.user.id
            return
        self._owner_id = None
        self.clear()


__all__ = ["OptimisticTaskStore", "StatusFilter"]
