"""Deferral primitives. Every scheduler runs deferred callbacks in submission order."""

from __future__ import annotations

import asyncio
from collections import deque
from collections.abc import Callable
from typing import Protocol

from loguru import logger

from pinvault_observer.core.errors import SchedulerUnavailableError


class Scheduler(Protocol):
    """Anything that can run a callback on a later turn, FIFO."""

    def defer(self, callback: Callable[[], object]) -> None: ...


class LoopScheduler:
    """Defers onto an asyncio event loop via call_soon."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    def defer(self, callback: Callable[[], object]) -> None:
        loop = self._loop
        if loop is None:
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError as exc:
                raise SchedulerUnavailableError(
                    "trigger() needs a running event loop; set a QueueScheduler for synchronous use",
                    code="no_running_loop",
                    original_error=exc,
                ) from exc
        loop.call_soon(callback)


class QueueScheduler:
    """Collects deferred callbacks until run_pending() drains them."""

    def __init__(self) -> None:
        self._queue: deque[Callable[[], object]] = deque()

    def defer(self, callback: Callable[[], object]) -> None:
        self._queue.append(callback)

    def run_pending(self) -> int:
        """Run queued callbacks, including ones queued while running. Returns count run."""
        count = 0
        while self._queue:
            callback = self._queue.popleft()
            callback()
            count += 1
        return count

    def __len__(self) -> int:
        return len(self._queue)

    def __bool__(self) -> bool:
        # an empty queue is still a usable scheduler
        return True


_default: Scheduler = LoopScheduler()


def get_scheduler() -> Scheduler:
    """Process-wide default scheduler."""
    return _default


def set_scheduler(scheduler: Scheduler) -> Scheduler:
    """Replace the default scheduler. Returns the previous one."""
    global _default
    previous = _default
    _default = scheduler
    logger.debug("Default scheduler set to {}", type(scheduler).__name__)
    return previous
