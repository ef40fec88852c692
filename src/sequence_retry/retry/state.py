"""
Per-execution retry state.

This module defines the Attempt record and the RetryState that one
execution of a RetryingSequence owns exclusively. Neither is persisted;
both vanish once the execution terminates.
"""

from collections.abc import AsyncIterator
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from sequence_retry.retry.schedule import Schedule


class AttemptOutcome(str, Enum):
    """
    How a single attempt ended.

    CANCELLED is not a failure: the consumer stopped listening.
    ABORTED means the consumer raised into the sequence while it was
    being delivered, e.g. an observer callback failed.
    """

    SUCCESS = "success"
    FAILURE = "failure"
    CANCELLED = "cancelled"
    ABORTED = "aborted"


@dataclass(frozen=True)
class Attempt:
    """
    Record of one factory invocation and its subscription.

    Attributes:
        index: 0-based attempt number
        delay: Delay waited before this attempt (0.0 for the first)
        outcome: How the attempt ended
        error: Failure raised by the upstream sequence, if any
    """

    index: int
    delay: float
    outcome: AttemptOutcome
    error: BaseException | None = None

    def __post_init__(self) -> None:
        """Validate attempt invariants."""
        if self.index < 0:
            raise ValueError("index must be >= 0")

        if self.delay < 0:
            raise ValueError("delay must be >= 0")

        if (self.outcome is AttemptOutcome.FAILURE) != (self.error is not None):
            raise ValueError("error must be set exactly when outcome is failure")


@dataclass
class RetryState:
    """
    Mutable state of one active execution.

    Attributes:
        attempt_index: Index of the attempt in progress (0-based)
        delay: Delay that preceded the attempt in progress
        upstream: Iterator of the currently subscribed sequence, if any
        cancelled: Set once cancellation has been requested
        in_progress: True from the start of an attempt until it is finished
        attempts: Finished attempts, oldest first
    """

    attempt_index: int = 0
    delay: float = 0.0
    upstream: AsyncIterator[Any] | None = None
    cancelled: bool = False
    in_progress: bool = False
    attempts: list[Attempt] = field(default_factory=list)

    def cancel(self) -> None:
        """Request cancellation; no retry is scheduled after this."""
        self.cancelled = True

    def next_delay(self, schedule: Schedule) -> float | None:
        """Delay before the next attempt, or None once the schedule is exhausted."""
        if self.attempt_index >= len(schedule):
            return None
        return schedule[self.attempt_index]

    def start(self) -> None:
        """Mark the current attempt as started; it must be finished exactly once."""
        self.in_progress = True

    def finish(self, outcome: AttemptOutcome, error: BaseException | None = None) -> Attempt:
        """Record the attempt in progress as finished and return its record."""
        self.in_progress = False
        attempt = Attempt(
            index=self.attempt_index,
            delay=self.delay,
            outcome=outcome,
            error=error,
        )
        self.attempts.append(attempt)
        return attempt

    def advance(self, delay: float) -> None:
        """Move on to the next attempt, which waits ``delay`` first."""
        self.attempt_index += 1
        self.delay = delay
