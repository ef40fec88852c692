"""
Retry combinator for asynchronous sequences.

Main Components:
    - RetryingSequence: Re-subscribes to a fresh upstream after each failure
    - Schedule: Immutable list of delays between attempts
    - Attempt / RetryState: Per-execution attempt tracking
    - InvalidScheduleError: Raised for negative or non-finite delays

Usage:
    >>> from sequence_retry.retry import with_retry
    >>> async for value in with_retry([1, 1, 2], make_stream):
    ...     handle(value)
"""

from sequence_retry.retry.engine import RetryingSequence, with_retry
from sequence_retry.retry.exceptions import (
    InvalidScheduleError,
    SequenceRetryError,
    SubscriptionError,
)
from sequence_retry.retry.schedule import Schedule
from sequence_retry.retry.state import Attempt, AttemptOutcome, RetryState

__all__ = [
    "Attempt",
    "AttemptOutcome",
    "InvalidScheduleError",
    "RetryState",
    "RetryingSequence",
    "Schedule",
    "SequenceRetryError",
    "SubscriptionError",
    "with_retry",
]
