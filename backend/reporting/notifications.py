"""User-facing notifications raised by the coordinator."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Literal

from reporting.config import NOTIFICATION_LOG_SIZE

Level = Literal["success", "info", "error"]


@dataclass(frozen=True)
class Notification:
    level: Level
    title: str
    description: str = ""


class NotificationLog:
    """Bounded FIFO of notifications waiting to be shown; oldest drop first."""

    def __init__(self, maxlen: int = NOTIFICATION_LOG_SIZE):
        self._items: deque[Notification] = deque(maxlen=maxlen)

    def __call__(self, notification: Notification) -> None:
        self._items.append(notification)

    def __len__(self) -> int:
        return len(self._items)

    def drain(self) -> list[Notification]:
        items = list(self._items)
        self._items.clear()
        return items

    def last(self, level: Level | None = None) -> Notification | None:
        """Most recent notification (optionally of one level), left in place."""
        for item in reversed(self._items):
            if level is None or item.level == level:
                return item
        return None
