"""
Retrying asynchronous sequences.

Wraps a factory that produces a fresh async sequence per attempt and
re-subscribes after a scheduled delay whenever the sequence fails:

- Values are forwarded downstream as they arrive (no buffering)
- Completion ends the whole sequence (never retried)
- Failure waits out the next scheduled delay, then calls the factory again
- Once the schedule is exhausted, the last failure is raised unchanged

Architecture: asyncio async iterators + pluggable timers + observer subscriptions
"""

from sequence_retry.logging_config import configure_logging
from sequence_retry.retry import (
    Attempt,
    AttemptOutcome,
    InvalidScheduleError,
    RetryingSequence,
    Schedule,
    SequenceRetryError,
    SubscriptionError,
    with_retry,
)
from sequence_retry.sequence import (
    CallbackObserver,
    LoopTimer,
    Observer,
    Subscription,
    Timer,
    VirtualTimer,
    subscribe,
)

__version__ = "0.1.0"

__all__ = [
    "Attempt",
    "AttemptOutcome",
    "CallbackObserver",
    "InvalidScheduleError",
    "LoopTimer",
    "Observer",
    "RetryingSequence",
    "Schedule",
    "SequenceRetryError",
    "Subscription",
    "SubscriptionError",
    "Timer",
    "VirtualTimer",
    "configure_logging",
    "subscribe",
    "with_retry",
]
