"""User-facing notifications, queued like flash messages."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable


class NotificationLevel(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
    INFO = "info"


@dataclass(slots=True, frozen=True)
class Notification:
    level: NotificationLevel
    message: str


Listener = Callable[[Notification], None]


class Notifier:
    """Queue of notifications plus optional live listeners."""

    def __init__(self) -> None:
        self._queue: list[Notification] = []
        self._listeners: list[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener``; the returned callable removes it again."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def notify(self, level: NotificationLevel, message: str) -> Notification:
        notification = Notification(level=level, message=message)
        self._queue.append(notification)
        for listener in list(self._listeners):
            listener(notification)
        return notification

    def success(self, message: str) -> Notification:
        return self.notify(NotificationLevel.SUCCESS, message)

    def error(self, message: str) -> Notification:
        return self.notify(NotificationLevel.ERROR, message)

    def info(self, message: str) -> Notification:
        return self.notify(NotificationLevel.INFO, message)

    @property
    def pending(self) -> list[Notification]:
        return list(self._queue)

    def pop_all(self) -> list[Notification]:
        """Retrieve and clear any queued notifications."""
        messages, self._queue = self._queue, []
        return messages


__all__ = ["Notification", "NotificationLevel", "Notifier"]
