"""Clock and timer abstractions for the session state machine.

The state machine never sleeps or reads the clock directly. It asks a
scheduler for the current time and for one-shot delayed calls, and keeps
the returned handles so it can cancel them. Two implementations exist:

* AsyncioScheduler runs callbacks on a host asyncio event loop.
* ManualScheduler keeps a virtual clock that only moves when advance()
  is called, so tests and replays run instantly and deterministically.
"""

import asyncio
import heapq
import itertools
import logging
from abc import ABC, abstractmethod
from typing import Callable, List, Optional, Tuple

logger = logging.getLogger(__name__)


class TimerHandle(ABC):
    """A scheduled call that can be cancelled."""

    @abstractmethod
    def cancel(self) -> None:
        """Prevent the callback from running. Safe to call more than once."""

    @abstractmethod
    def cancelled(self) -> bool:
        """Return True if cancel() was called."""


class Scheduler(ABC):
    """Source of time and one-shot delayed calls."""

    @abstractmethod
    def now(self) -> float:
        """Current time in seconds on a monotonic clock."""

    @abstractmethod
    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        """Run callback after delay seconds."""


class _AsyncioTimer(TimerHandle):

    def __init__(self, handle: asyncio.TimerHandle):
        self._handle = handle

    def cancel(self) -> None:
        self._handle.cancel()

    def cancelled(self) -> bool:
        return self._handle.cancelled()


class AsyncioScheduler(Scheduler):
    """Schedules callbacks on an asyncio event loop."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        """Initialize asyncio scheduler.

        Args:
            loop: Event loop to use. If None, the running loop is looked up
                  on first use.
        """
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def now(self) -> float:
        return self.loop.time()

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        return _AsyncioTimer(self.loop.call_later(delay, callback))


class _ManualTimer(TimerHandle):

    def __init__(self, due: float, callback: Callable[[], None]):
        self.due = due
        self.callback = callback
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    def cancelled(self) -> bool:
        return self._cancelled


class ManualScheduler(Scheduler):
    """Virtual clock that fires due callbacks when advanced."""

    def __init__(self, start: float = 0.0):
        self._now = start
        self._queue: List[Tuple[float, int, _ManualTimer]] = []
        self._sequence = itertools.count()

    def now(self) -> float:
        return self._now

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        timer = _ManualTimer(self._now + max(0.0, delay), callback)
        heapq.heappush(self._queue, (timer.due, next(self._sequence), timer))
        return timer

    def advance(self, seconds: float) -> int:
        """Move the clock forward, running every callback that falls due.

        Callbacks run in due order; ties run in scheduling order. A callback
        may schedule further calls, which also run if they fall due within
        the same advance.

        Returns:
            Number of callbacks that ran
        """
        target = self._now + seconds
        fired = 0
        while self._queue and self._queue[0][0] <= target:
            due, _, timer = heapq.heappop(self._queue)
            if timer.cancelled():
                continue
            self._now = due
            timer.callback()
            fired += 1
        self._now = target
        return fired

    def pending(self) -> int:
        """Number of scheduled callbacks that have not been cancelled."""
        return sum(1 for _, _, timer in self._queue if not timer.cancelled())
