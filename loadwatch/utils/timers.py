"""
Cancellable one-shot timers.

Two schedulers share the same `call_later(delay, callback) -> TimerHandle` shape:
- `QtScheduler` arms a single-shot QTimer on the running Qt event loop.
- `ManualScheduler` keeps a virtual clock that callers advance explicitly, for
  headless drivers and deterministic tests.

Cancelling a handle that already fired or was already cancelled does nothing.
"""

from __future__ import annotations

import heapq
import itertools
from typing import Callable, Protocol

from PyQt6.QtCore import QObject, QTimer

TimerCallback = Callable[[], None]


class TimerHandle(Protocol):
    @property
    def active(self) -> bool: ...

    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: TimerCallback) -> TimerHandle: ...


def cancel_timer(handle: TimerHandle | None) -> None:
    """Cancel `handle` if there is one."""
    if handle is not None:
        handle.cancel()


class ManualTimer:
    def __init__(self, due: float, callback: TimerCallback) -> None:
        self.due = due
        self.callback = callback
        self.cancelled = False
        self.fired = False

    @property
    def active(self) -> bool:
        return not (self.cancelled or self.fired)

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Virtual clock scheduler; timers only fire inside `advance`/`run_until_idle`."""

    def __init__(self, start: float = 0.0) -> None:
        self.now = start
        self._queue: list[tuple[float, int, ManualTimer]] = []
        self._seq = itertools.count()

    def call_later(self, delay: float, callback: TimerCallback) -> ManualTimer:
        timer = ManualTimer(self.now + max(delay, 0.0), callback)
        heapq.heappush(self._queue, (timer.due, next(self._seq), timer))
        return timer

    def advance(self, seconds: float) -> None:
        """Move the clock forward, firing due timers in due-time order."""
        target = self.now + seconds
        while self._queue and self._queue[0][0] <= target:
            due, _, timer = heapq.heappop(self._queue)
            if not timer.active:
                continue
            self.now = max(self.now, due)
            timer.fired = True
            timer.callback()
        self.now = target

    def run_until_idle(self, limit: int = 10_000) -> None:
        """Fire every pending timer, including ones armed while running."""
        for _ in range(limit):
            pending = [entry for entry in self._queue if entry[2].active]
            if not pending:
                self._queue.clear()
                return
            self.advance(max(min(entry[0] for entry in pending) - self.now, 0.0))
        raise RuntimeError("Timers kept re-arming; gave up after %d rounds" % limit)

    @property
    def pending(self) -> int:
        return sum(1 for entry in self._queue if entry[2].active)


class QtTimerHandle:
    def __init__(self, scheduler: "QtScheduler", timer: QTimer, callback: TimerCallback) -> None:
        self._scheduler = scheduler
        self._timer = timer
        self._callback = callback
        self._done = False
        timer.timeout.connect(self._fire)

    @property
    def active(self) -> bool:
        return not self._done

    def _fire(self) -> None:
        if self._done:
            return
        self._release()
        self._callback()

    def cancel(self) -> None:
        if self._done:
            return
        self._timer.stop()
        self._release()

    def _release(self) -> None:
        self._done = True
        self._scheduler._forget(self)
        self._timer.deleteLater()


class QtScheduler:
    """Timers backed by single-shot QTimers on the current thread's event loop."""

    def __init__(self, parent: QObject | None = None) -> None:
        self._parent = parent
        self._live: set[QtTimerHandle] = set()

    def call_later(self, delay: float, callback: TimerCallback) -> QtTimerHandle:
        timer = QTimer(self._parent)
        timer.setSingleShot(True)
        handle = QtTimerHandle(self, timer, callback)
        # Handles must outlive the caller's reference until they fire
        self._live.add(handle)
        timer.start(max(int(round(delay * 1000)), 0))
        return handle

    def _forget(self, handle: QtTimerHandle) -> None:
        self._live.discard(handle)

    @property
    def pending(self) -> int:
        return len(self._live)
