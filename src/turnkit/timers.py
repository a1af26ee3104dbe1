"""
turnkit.timers — Cancellable single-shot timers
================================================

The engine never talks to a platform timer directly. It is given a
scheduler with two methods:

    schedule(delay_seconds, callback) -> handle with cancel()
    now() -> float seconds

Three schedulers ship with the package:

ThreadingScheduler
    Default. One ``threading.Timer`` daemon thread per armed timeout.
AsyncioScheduler
    ``loop.call_later`` on an asyncio event loop, for engines driven
    from async code.
ManualScheduler
    A fake clock. Nothing fires until ``advance()`` is called, which
    makes timeout behaviour deterministic in tests and simulations.
"""

from __future__ import annotations

import asyncio
import heapq
import itertools
import logging
import threading
import time
from typing import Callable, List, Optional, Protocol, Tuple

logger = logging.getLogger("turnkit.timers")


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def schedule(self, delay: float, callback: Callable[[], None]) -> TimerHandle: ...

    def now(self) -> float: ...


class ThreadingScheduler:
    """Runs each callback on its own daemon ``threading.Timer``."""

    def schedule(self, delay: float, callback: Callable[[], None]) -> threading.Timer:
        timer = threading.Timer(delay, callback)
        timer.daemon = True
        timer.start()
        logger.debug("Thread timer armed (%.2fs)", delay)
        return timer

    def now(self) -> float:
        return time.time()


class AsyncioScheduler:
    """
    Schedules callbacks on an asyncio event loop.

    If no loop is given, the running loop is looked up on every call,
    so the scheduler must then be used from inside that loop.
    """

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        self._loop = loop

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        return self._loop if self._loop is not None else asyncio.get_running_loop()

    def schedule(self, delay: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        handle = self._get_loop().call_later(delay, callback)
        logger.debug("Loop timer armed (%.2fs)", delay)
        return handle

    def now(self) -> float:
        return time.time()


class ManualTimer:
    """Handle returned by ManualScheduler."""

    def __init__(self, expires_at: float, callback: Callable[[], None]) -> None:
        self.expires_at = expires_at
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """
    Deterministic scheduler driven by an explicit clock.

    Each timer stores the clock value at which it expires. ``advance()``
    moves the clock forward, stopping at every expiry on the way so a
    callback that re-arms a timer sees the clock at its own deadline.
    """

    def __init__(self, start: float = 0.0) -> None:
        self._now = float(start)
        self._queue: List[Tuple[float, int, ManualTimer]] = []
        self._counter = itertools.count()

    def schedule(self, delay: float, callback: Callable[[], None]) -> ManualTimer:
        timer = ManualTimer(self._now + delay, callback)
        heapq.heappush(self._queue, (timer.expires_at, next(self._counter), timer))
        logger.debug("Manual timer armed at %.2f (expires %.2f)", self._now, timer.expires_at)
        return timer

    def now(self) -> float:
        return self._now

    def advance(self, seconds: float) -> int:
        """
        Move the clock forward and fire every timer that expires.

        Returns the number of callbacks that were fired.
        """
        if seconds < 0:
            raise ValueError("Cannot move the clock backwards")
        target = self._now + seconds
        fired = 0
        while self._queue and self._queue[0][0] <= target:
            expires_at, _, timer = heapq.heappop(self._queue)
            if timer.cancelled:
                continue
            self._now = expires_at
            fired += 1
            timer.callback()
        self._now = target
        return fired

    def pending(self) -> int:
        """Number of armed, not yet cancelled timers."""
        return sum(1 for _, _, timer in self._queue if not timer.cancelled)
