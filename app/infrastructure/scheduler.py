"""Cancellable timers for the simulated real-time behaviour.

Every timer returns a ``TaskHandle`` owned by whoever scheduled it, so the
owner can stop it on sign-out or shutdown. ``AsyncioScheduler`` runs callbacks
on the event loop; ``ManualScheduler`` is a fake clock that only moves when
``advance`` is called.
"""
import asyncio
import heapq
import itertools
from typing import Callable, List, Optional, Protocol, Tuple

from app.core.logging import get_logger

logger = get_logger(__name__)

Callback = Callable[[], None]


class TaskHandle:
    """Handle to a scheduled one-shot or periodic task."""

    def __init__(self):
        self._cancelled = False
        self._timer = None

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None


class Scheduler(Protocol):
    def now(self) -> float: ...

    def call_later(self, delay: float, callback: Callback) -> TaskHandle: ...

    def call_every(self, interval: float, callback: Callback) -> TaskHandle: ...


def _run_safely(callback: Callback) -> None:
    try:
        callback()
    except Exception as e:
        logger.error(f"Scheduled task failed: {e}", exc_info=True)


class AsyncioScheduler:
    """Scheduler backed by an asyncio event loop.

    The loop is resolved lazily so the scheduler can be built before the
    application starts serving.
    """

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def now(self) -> float:
        return self.loop.time()

    def call_later(self, delay: float, callback: Callback) -> TaskHandle:
        handle = TaskHandle()

        def fire():
            handle._timer = None
            if not handle.cancelled:
                _run_safely(callback)

        handle._timer = self.loop.call_later(max(delay, 0.0), fire)
        return handle

    def call_every(self, interval: float, callback: Callback) -> TaskHandle:
        if interval <= 0:
            raise ValueError("interval must be positive")
        handle = TaskHandle()

        def tick():
            if handle.cancelled:
                return
            _run_safely(callback)
            if not handle.cancelled:
                handle._timer = self.loop.call_later(interval, tick)

        handle._timer = self.loop.call_later(interval, tick)
        return handle


class ManualScheduler:
    """Deterministic scheduler driven by an explicit clock.

    Example:
        >>> scheduler = ManualScheduler()
        >>> fired = []
        >>> _ = scheduler.call_later(3, lambda: fired.append("done"))
        >>> scheduler.advance(2.9); fired
        []
        >>> scheduler.advance(0.1); fired
        ['done']
    """

    def __init__(self, start: float = 0.0):
        self._now = start
        self._seq = itertools.count()
        self._queue: List[Tuple[float, int, TaskHandle, Callback, Optional[float]]] = []

    def now(self) -> float:
        return self._now

    def call_later(self, delay: float, callback: Callback) -> TaskHandle:
        handle = TaskHandle()
        self._push(self._now + max(delay, 0.0), handle, callback, None)
        return handle

    def call_every(self, interval: float, callback: Callback) -> TaskHandle:
        if interval <= 0:
            raise ValueError("interval must be positive")
        handle = TaskHandle()
        self._push(self._now + interval, handle, callback, interval)
        return handle

    @property
    def pending(self) -> int:
        """Number of scheduled, not cancelled tasks."""
        return sum(1 for _, _, handle, _, _ in self._queue if not handle.cancelled)

    def advance(self, seconds: float) -> None:
        """Move the clock forward, firing due callbacks in time order."""
        deadline = self._now + seconds
        while self._queue and self._queue[0][0] <= deadline:
            due, _, handle, callback, interval = heapq.heappop(self._queue)
            if handle.cancelled:
                continue
            self._now = due
            _run_safely(callback)
            if interval is not None and not handle.cancelled:
                self._push(due + interval, handle, callback, interval)
        self._now = deadline

    def _push(self, due: float, handle: TaskHandle, callback: Callback, interval: Optional[float]) -> None:
        heapq.heappush(self._queue, (due, next(self._seq), handle, callback, interval))
