"""Cancellable scheduling for the debounced autosave.

The coordinator only needs ``call_later(delay, callback)`` returning a
handle with ``cancel()``; ``asyncio.TimerHandle`` already has that shape.
"""

from __future__ import annotations

import asyncio
from typing import Callable, Protocol


class Cancellable(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: Callable[[], None]) -> Cancellable: ...


class AsyncioScheduler:
    """Schedules on the running event loop (or an explicit one)."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None):
        self._loop = loop

    def call_later(self, delay: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(delay, callback)


class AutosaveTimer:
    """At most one pending callback; every ``reschedule`` restarts the delay."""

    def __init__(self, scheduler: Scheduler, delay: float, callback: Callable[[], None]):
        self._scheduler = scheduler
        self.delay = delay
        self._callback = callback
        self._handle: Cancellable | None = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def reschedule(self) -> None:
        self.cancel()
        self._handle = self._scheduler.call_later(self.delay, self._fire)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self) -> None:
        self._handle = None
        self._callback()
