"""
Retry schedules.

A Schedule is the ordered, finite list of delays (seconds) that governs
retry backoff: ``schedule[i]`` is the wait before attempt ``i + 2``, the
first attempt always being immediate. An empty schedule means no retries.

Builders cover the usual backoff shapes:
    - Schedule.none(): no retries
    - Schedule.constant(): same delay every time
    - Schedule.linear(): delay grows by a fixed step
    - Schedule.exponential(): delay multiplied by a factor, capped
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import TYPE_CHECKING, overload

from sequence_retry.retry.exceptions import InvalidScheduleError

if TYPE_CHECKING:
    from sequence_retry.config import Settings


@dataclass(frozen=True)
class Schedule:
    """
    Immutable sequence of non-negative retry delays.

    The same instance can back any number of independent executions;
    attempt counters live in RetryState, never here.

    Attributes:
        delays: Delays in seconds, in the order they are consumed
    """

    delays: tuple[float, ...] = ()

    def __post_init__(self) -> None:
        """Normalize delays to floats and validate them."""
        normalized = []
        for index, delay in enumerate(self.delays):
            try:
                value = float(delay)
            except (TypeError, ValueError):
                raise InvalidScheduleError(index, delay) from None
            if not math.isfinite(value) or value < 0:
                raise InvalidScheduleError(index, delay)
            normalized.append(value)
        object.__setattr__(self, "delays", tuple(normalized))

    @classmethod
    def of(cls, value: Schedule | Iterable[float]) -> Schedule:
        """Coerce a Schedule or any iterable of numbers into a Schedule."""
        if isinstance(value, Schedule):
            return value
        return cls(tuple(value))

    @classmethod
    def none(cls) -> Schedule:
        """Empty schedule: the first failure is terminal."""
        return cls()

    @classmethod
    def constant(cls, delay: float, retries: int) -> Schedule:
        """``retries`` retries, each preceded by the same ``delay``."""
        _check_retries(retries)
        return cls((delay,) * retries)

    @classmethod
    def linear(cls, delay: float, retries: int) -> Schedule:
        """Delays of ``delay``, ``2 * delay``, ... ``retries * delay``."""
        _check_retries(retries)
        return cls(tuple(delay * n for n in range(1, retries + 1)))

    @classmethod
    def exponential(
        cls,
        delay: float,
        retries: int,
        factor: float = 2.0,
        max_delay: float = 30.0,
    ) -> Schedule:
        """
        Exponential backoff capped at ``max_delay``.

        Args:
            delay: First delay in seconds
            retries: Number of retries (schedule length)
            factor: Multiplier applied per retry
            max_delay: Upper bound for any single delay

        Returns:
            Schedule of ``min(delay * factor**i, max_delay)`` for i in 0..retries-1
        """
        _check_retries(retries)
        return cls(tuple(min(delay * factor**i, max_delay) for i in range(retries)))

    @classmethod
    def from_settings(cls, settings: Settings) -> Schedule:
        """Build the schedule configured by RETRY_SCHEDULE."""
        return cls(tuple(settings.RETRY_SCHEDULE))

    @property
    def total(self) -> float:
        """Cumulative delay if every retry is used."""
        return sum(self.delays)

    def __len__(self) -> int:
        return len(self.delays)

    def __iter__(self) -> Iterator[float]:
        return iter(self.delays)

    @overload
    def __getitem__(self, index: int) -> float: ...

    @overload
    def __getitem__(self, index: slice) -> tuple[float, ...]: ...

    def __getitem__(self, index: int | slice) -> float | tuple[float, ...]:
        return self.delays[index]


def _check_retries(retries: int) -> None:
    if retries < 0:
        raise ValueError(f"retries must be >= 0, got {retries}")
