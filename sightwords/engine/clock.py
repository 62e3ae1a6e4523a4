from __future__ import annotations

"""Cancellable scheduled callbacks for trial timers.

Two schedulers share one interface: `ThreadingScheduler` arms real
`threading.Timer`s, `ManualScheduler` keeps a virtual clock that only moves
when `advance()` is called (tests and scripted simulations).
"""

import heapq
import itertools
import threading
import time
from typing import Callable, List, Optional, Protocol, Tuple


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def now(self) -> float: ...

    def call_later(self, delay_s: float, fn: Callable[[], None]) -> TimerHandle: ...


class _ThreadingHandle:
    def __init__(self, timer: threading.Timer) -> None:
        self._timer = timer

    def cancel(self) -> None:
        self._timer.cancel()


class ThreadingScheduler:
    """Wall-clock scheduler backed by daemon `threading.Timer`s."""

    def now(self) -> float:
        return time.monotonic()

    def call_later(self, delay_s: float, fn: Callable[[], None]) -> TimerHandle:
        t = threading.Timer(max(0.0, float(delay_s)), fn)
        t.daemon = True
        t.start()
        return _ThreadingHandle(t)


class _ManualHandle:
    def __init__(self) -> None:
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Virtual clock; callbacks run synchronously inside `advance()`."""

    def __init__(self, start: float = 0.0) -> None:
        self._now = float(start)
        self._seq = itertools.count()
        self._queue: List[Tuple[float, int, _ManualHandle, Callable[[], None]]] = []

    def now(self) -> float:
        return self._now

    def call_later(self, delay_s: float, fn: Callable[[], None]) -> TimerHandle:
        handle = _ManualHandle()
        due = self._now + max(0.0, float(delay_s))
        heapq.heappush(self._queue, (due, next(self._seq), handle, fn))
        return handle

    def pending(self) -> int:
        return sum(1 for _, _, h, _ in self._queue if not h.cancelled)

    def advance(self, seconds: float) -> None:
        """Move the clock forward, firing due callbacks in order.

        Callbacks scheduled while advancing fire too if they fall inside the
        window.
        """
        target = self._now + float(seconds)
        while self._queue and self._queue[0][0] <= target:
            due, _, handle, fn = heapq.heappop(self._queue)
            self._now = max(self._now, due)
            if not handle.cancelled:
                fn()
        self._now = target


class TimerScope:
    """All timers armed for one trial (or one session); cancelled together."""

    def __init__(self, scheduler: Scheduler) -> None:
        self._scheduler = scheduler
        self._handles: List[TimerHandle] = []
        self._lock = threading.Lock()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def call_later(self, delay_s: float, fn: Callable[[], None]) -> Optional[TimerHandle]:
        with self._lock:
            if self._closed:
                return None
            handle = self._scheduler.call_later(delay_s, fn)
            self._handles.append(handle)
            return handle

    def cancel_all(self) -> None:
        with self._lock:
            self._closed = True
            handles, self._handles = self._handles, []
        for h in handles:
            h.cancel()
