"""
One-shot timers used to wait out retry delays.

Defines the Timer interface the retry engine depends on, so the event
loop clock can be swapped for a virtual one in tests and simulations
without changing the engine.
"""

import asyncio
import heapq
import itertools
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Protocol

import structlog

logger = structlog.get_logger(__name__)


class TimerHandle(Protocol):
    """Handle returned by Timer.call_later; cancel() stops it from firing."""

    def cancel(self) -> None: ...


class Timer(ABC):
    """
    Abstract base class for one-shot timers.

    Implementations only need `call_later`. The `sleep` coroutine built on
    top of it is cancellable: cancelling the awaiting task cancels the
    underlying handle before it fires.
    """

    @abstractmethod
    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        """
        Schedule ``callback`` to run once after ``delay`` seconds.

        Must be called from the thread running the event loop.

        Returns:
            Handle whose cancel() prevents the callback if it has not run yet
        """
        ...

    async def sleep(self, delay: float) -> None:
        """Suspend the current task for ``delay`` seconds of this timer's clock."""
        loop = asyncio.get_running_loop()
        waiter: asyncio.Future[None] = loop.create_future()

        def _wake() -> None:
            if not waiter.done():
                waiter.set_result(None)

        handle = self.call_later(delay, _wake)
        try:
            await waiter
        finally:
            handle.cancel()


class LoopTimer(Timer):
    """Timer backed by the running asyncio event loop."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        return asyncio.get_running_loop().call_later(delay, callback)


class _VirtualHandle:
    def __init__(self, timer: "VirtualTimer", deadline: float, callback: Callable[[], None]):
        self.deadline = deadline
        self.callback = callback
        self.cancelled = False
        self.fired = False
        self._timer = timer

    def cancel(self) -> None:
        if self.fired or self.cancelled:
            return
        self.cancelled = True
        self._timer._discard(self)


class VirtualTimer(Timer):
    """
    Deterministic timer driven by a virtual clock.

    Every requested delay is recorded in ``delays``. With ``autoadvance``
    (the default) the clock jumps forward by the delay and the callback
    runs on the next loop iteration, so no real time passes. Without it,
    callbacks stay pending until ``advance()`` moves the clock past their
    deadline, which lets tests act while a delay is in progress.

    Attributes:
        now: Current virtual time in seconds
        delays: Every delay requested so far, in order
    """

    def __init__(self, autoadvance: bool = True, start: float = 0.0):
        self.autoadvance = autoadvance
        self.now = start
        self.delays: list[float] = []
        self._pending: list[tuple[float, int, _VirtualHandle]] = []
        self._counter = itertools.count()

    @property
    def pending(self) -> int:
        """Number of scheduled callbacks that have neither fired nor been cancelled."""
        return len(self._pending)

    @property
    def elapsed(self) -> float:
        """Sum of all requested delays."""
        return sum(self.delays)

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        if delay < 0:
            raise ValueError(f"delay must be >= 0, got {delay}")

        self.delays.append(delay)
        handle = _VirtualHandle(self, self.now + delay, callback)
        heapq.heappush(self._pending, (handle.deadline, next(self._counter), handle))

        if self.autoadvance:
            asyncio.get_running_loop().call_soon(self._autofire, handle)

        return handle

    def advance(self, seconds: float) -> int:
        """
        Move the virtual clock forward and fire every callback now due.

        Args:
            seconds: Amount of virtual time to pass

        Returns:
            Number of callbacks fired
        """
        if seconds < 0:
            raise ValueError("the virtual clock only moves forward")
        return self._fire_until(self.now + seconds)

    def _fire_until(self, deadline: float) -> int:
        fired = 0
        while self._pending and self._pending[0][0] <= deadline:
            _, _, handle = heapq.heappop(self._pending)
            self.now = max(self.now, handle.deadline)
            handle.fired = True
            handle.callback()
            fired += 1
        self.now = max(self.now, deadline)
        if fired:
            logger.debug("virtual_timer_fired", fired=fired, now=self.now)
        return fired

    def _autofire(self, handle: _VirtualHandle) -> None:
        if handle.cancelled or handle.fired:
            return
        self._fire_until(handle.deadline)

    def _discard(self, handle: _VirtualHandle) -> None:
        self._pending = [entry for entry in self._pending if entry[2] is not handle]
        heapq.heapify(self._pending)
