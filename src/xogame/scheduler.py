"""
Cooperative, single-threaded deferred calls.

The session needs exactly two kinds of suspension: the AI "thinking" delay and
the replay tick. Both go through a Scheduler so they can be cancelled, and so
tests and the terminal CLI can drive time by hand.
"""
from __future__ import annotations

import asyncio
import heapq
import itertools
from typing import Callable, List, Optional, Protocol, Tuple


class Cancellable(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: Callable[[], None]) -> Cancellable: ...


class TimerHandle:
    def __init__(self, due: float, callback: Callable[[], None]) -> None:
        self.due = due
        self.callback: Optional[Callable[[], None]] = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True
        self.callback = None


class ManualScheduler:
    """Virtual clock. Nothing fires until advance() or run_all() is called."""

    def __init__(self) -> None:
        self.now = 0.0
        self._queue: List[Tuple[float, int, TimerHandle]] = []
        self._seq = itertools.count()

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        if delay < 0:
            raise ValueError("delay must be >= 0")
        handle = TimerHandle(self.now + delay, callback)
        heapq.heappush(self._queue, (handle.due, next(self._seq), handle))
        return handle

    @property
    def pending(self) -> int:
        return sum(1 for _, _, h in self._queue if not h.cancelled)

    def _pop_due(self, until: Optional[float]) -> Optional[TimerHandle]:
        while self._queue:
            due, _, handle = self._queue[0]
            if until is not None and due > until:
                return None
            heapq.heappop(self._queue)
            if not handle.cancelled:
                return handle
        return None

    def _fire(self, handle: TimerHandle) -> None:
        self.now = max(self.now, handle.due)
        callback = handle.callback
        handle.callback = None
        if callback is not None:
            callback()

    def advance(self, seconds: float) -> int:
        """Move the clock forward, firing due calls in order. Returns how many fired."""
        target = self.now + seconds
        fired = 0
        while True:
            handle = self._pop_due(target)
            if handle is None:
                break
            self._fire(handle)
            fired += 1
        self.now = target
        return fired

    def run_all(self, max_calls: int = 100_000) -> int:
        fired = 0
        while fired < max_calls:
            handle = self._pop_due(None)
            if handle is None:
                break
            self._fire(handle)
            fired += 1
        return fired


class AsyncioScheduler:
    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        return self._loop if self._loop is not None else asyncio.get_running_loop()

    def call_later(self, delay: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        return self.loop.call_later(delay, callback)
