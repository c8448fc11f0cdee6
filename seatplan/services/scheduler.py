"""
Delayed-task primitives used by the auto-save pipeline and view-state writes
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, List, Optional, Protocol, Set

logger = logging.getLogger(__name__)


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    """Cancellable delayed callbacks plus fire-and-forget coroutines"""

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle: ...

    def spawn(self, awaitable: Awaitable[Any]) -> None: ...


class AsyncioScheduler:
    """Scheduler backed by the running asyncio event loop"""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop
        self._tasks: Set[asyncio.Future] = set()

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        return self._loop or asyncio.get_running_loop()

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        return self._get_loop().call_later(delay, callback)

    def spawn(self, awaitable: Awaitable[Any]) -> None:
        task = asyncio.ensure_future(awaitable, loop=self._get_loop())
        # Keep a reference until done so the task is not garbage collected
        self._tasks.add(task)
        task.add_done_callback(self._on_done)

    def _on_done(self, task: asyncio.Future) -> None:
        self._tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error(f"Background task failed: {task.exception()}")

    async def drain(self) -> None:
        """Wait for every spawned task (used on shutdown)"""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)


class _ManualTimer:
    def __init__(self, when: float, seq: int, callback: Callable[[], None]):
        self.when = when
        self.seq = seq
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Virtual-clock scheduler: time only moves when ``advance`` is called.

    Spawned coroutines are queued and run by ``run_pending``.
    """

    def __init__(self):
        self.now = 0.0
        self._seq = 0
        self._timers: List[_ManualTimer] = []
        self._spawned: List[Awaitable[Any]] = []

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        self._seq += 1
        timer = _ManualTimer(self.now + delay, self._seq, callback)
        self._timers.append(timer)
        return timer

    def spawn(self, awaitable: Awaitable[Any]) -> None:
        self._spawned.append(awaitable)

    @property
    def pending_timers(self) -> int:
        return sum(1 for t in self._timers if not t.cancelled)

    @property
    def pending_tasks(self) -> int:
        return len(self._spawned)

    def advance(self, seconds: float) -> None:
        """Move the clock forward, firing due timers in order"""
        target = self.now + seconds
        while True:
            due = [t for t in self._timers if not t.cancelled and t.when <= target]
            if not due:
                break
            timer = min(due, key=lambda t: (t.when, t.seq))
            self._timers.remove(timer)
            self.now = timer.when
            timer.callback()
        self._timers = [t for t in self._timers if not t.cancelled]
        self.now = target

    async def run_pending(self) -> None:
        while self._spawned:
            await self._spawned.pop(0)
