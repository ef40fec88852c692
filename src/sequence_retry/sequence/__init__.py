"""
Sequence primitives the retry engine builds on: observers, subscriptions and timers.
"""

from sequence_retry.sequence.observer import (
    CallbackObserver,
    Observer,
    Subscription,
    subscribe,
)
from sequence_retry.sequence.timers import LoopTimer, Timer, TimerHandle, VirtualTimer

__all__ = [
    "CallbackObserver",
    "LoopTimer",
    "Observer",
    "Subscription",
    "Timer",
    "TimerHandle",
    "VirtualTimer",
    "subscribe",
]
