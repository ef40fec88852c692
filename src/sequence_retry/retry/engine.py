"""
Retry engine for asynchronous sequences.

This module implements RetryingSequence, which re-subscribes to a fresh
sequence from a factory each time the current one fails, waiting out the
next delay of a Schedule in between. It provides a single entry point,
`with_retry`, for wrapping any sequence factory.

Retry Policy:
    1. Attempt 1 runs immediately; values are forwarded as they arrive
    2. Completion ends the whole sequence, it is never retried
    3. A retryable failure waits schedule[i] and starts attempt i + 2
    4. When the schedule is exhausted the last failure is raised unchanged

Usage:
    sequence = with_retry([1, 1, 2], lambda: fetch_updates(feed))
    async for update in sequence:
        ...
"""

import asyncio
import inspect
from collections.abc import AsyncIterable, AsyncIterator, Awaitable, Callable, Iterable
from typing import Generic, TypeVar, Union

import structlog

from sequence_retry.config import settings
from sequence_retry.monitoring import metrics
from sequence_retry.retry.schedule import Schedule
from sequence_retry.retry.state import Attempt, AttemptOutcome, RetryState
from sequence_retry.sequence.observer import Observer, Subscription, subscribe
from sequence_retry.sequence.timers import LoopTimer, Timer

logger = structlog.get_logger(__name__)

T = TypeVar("T")

SequenceFactory = Callable[[], Union[AsyncIterable[T], Awaitable[AsyncIterable[T]]]]


class RetryingSequence(Generic[T]):
    """
    Async sequence that restarts its upstream from scratch on failure.

    Every iteration (or subscription) is an independent execution with its
    own RetryState, so one instance and its Schedule can be reused freely.
    At most one upstream sequence is subscribed at any time within an
    execution: the failed one is closed before the factory is called again.

    Values forwarded before a failure stay delivered; a retry replays the
    whole sequence, not the remainder.

    Attributes:
        schedule: Delays between attempts
        factory: Produces a new upstream sequence per attempt
        timer: Clock used to wait out delays
        retry_on: Exception types that trigger a retry; others propagate at once
        name: Label used in logs and metrics
        on_attempt: Called with each finished Attempt
        record_metrics: Whether Prometheus metrics are recorded
    """

    def __init__(
        self,
        schedule: Schedule | Iterable[float],
        factory: SequenceFactory[T],
        *,
        timer: Timer | None = None,
        retry_on: tuple[type[Exception], ...] = (Exception,),
        name: str | None = None,
        on_attempt: Callable[[Attempt], None] | None = None,
        record_metrics: bool | None = None,
    ):
        """
        Initialize a retrying sequence.

        Args:
            schedule: Schedule or iterable of delays in seconds (may be empty)
            factory: Zero-argument callable returning an async iterable, or
                an awaitable resolving to one
            timer: Timer for delays (defaults to the event loop clock)
            retry_on: Failure types that are retried
            name: Label for logs/metrics (defaults to the factory's name)
            on_attempt: Hook receiving every finished Attempt
            record_metrics: Override for settings.PROMETHEUS_ENABLED
        """
        self.schedule = Schedule.of(schedule)
        self.factory = factory
        self.timer = timer if timer is not None else LoopTimer()
        self.retry_on = retry_on
        self.name = name or getattr(factory, "__name__", "sequence")
        self.on_attempt = on_attempt
        self.record_metrics = (
            settings.PROMETHEUS_ENABLED if record_metrics is None else record_metrics
        )

    def __aiter__(self) -> AsyncIterator[T]:
        return self.iterate(RetryState())

    def subscribe(self, observer: Observer[T]) -> Subscription[T]:
        """
        Push this sequence into ``observer``.

        Cancelling the returned subscription flags the execution as
        cancelled before its task is cancelled, so a failure being
        processed at that moment never schedules a retry.
        """
        state = RetryState()
        return subscribe(self.iterate(state), observer, on_cancel=state.cancel)

    async def iterate(self, state: RetryState) -> AsyncIterator[T]:
        """
        Run one execution against ``state``.

        Args:
            state: Fresh RetryState owned by this execution

        Yields:
            Values of the currently subscribed upstream, in order

        Raises:
            Exception: Last upstream failure once retries are exhausted, or
                the first failure not matching ``retry_on``
        """
        log = logger.bind(sequence=self.name, schedule_length=len(self.schedule))

        try:
            while not state.cancelled:
                log.debug("Starting attempt", attempt=state.attempt_index + 1, delay=state.delay)
                failure: Exception | None = None
                state.start()
                try:
                    state.upstream = await self._open()
                except Exception as e:
                    failure = e

                while failure is None:
                    try:
                        value = await state.upstream.__anext__()
                    except StopAsyncIteration:
                        break
                    except Exception as e:
                        failure = e
                        break
                    yield value

                await self._close(state)

                if failure is None:
                    self._finish(state, AttemptOutcome.SUCCESS)
                    log.debug("Sequence completed", attempts=state.attempt_index + 1)
                    return

                self._finish(state, AttemptOutcome.FAILURE, failure)

                if state.cancelled:
                    return

                if not isinstance(failure, self.retry_on):
                    log.debug(
                        "Non-retryable failure",
                        attempt=state.attempt_index + 1,
                        error_type=type(failure).__name__,
                    )
                    raise failure

                delay = state.next_delay(self.schedule)
                if delay is None:
                    log.warning(
                        "Retry schedule exhausted",
                        attempts=state.attempt_index + 1,
                        error_type=type(failure).__name__,
                    )
                    if self.record_metrics:
                        metrics.sequence_exhausted_total.labels(
                            sequence=self.name, error_type=type(failure).__name__
                        ).inc()
                    raise failure

                log.debug(
                    "Attempt failed, retrying",
                    attempt=state.attempt_index + 1,
                    next_attempt=state.attempt_index + 2,
                    delay=delay,
                    error_type=type(failure).__name__,
                )
                if self.record_metrics:
                    metrics.sequence_retries_total.labels(sequence=self.name).inc()
                    metrics.sequence_retry_delay_seconds.labels(sequence=self.name).observe(delay)

                state.advance(delay)
                await self.timer.sleep(delay)

        except (asyncio.CancelledError, GeneratorExit):
            state.cancel()
            if state.in_progress:
                self._finish(state, AttemptOutcome.CANCELLED)
            log.debug("Sequence cancelled", attempt=state.attempt_index + 1)
            if self.record_metrics:
                metrics.sequence_cancellations_total.labels(sequence=self.name).inc()
            raise

        except Exception as e:
            # an attempt still in progress means the consumer threw this in at the yield
            if state.in_progress:
                self._finish(state, AttemptOutcome.ABORTED)
                log.debug(
                    "Sequence aborted by consumer",
                    attempt=state.attempt_index + 1,
                    error_type=type(e).__name__,
                )
            raise

        finally:
            await self._close(state)

    async def _open(self) -> AsyncIterator[T]:
        produced = self.factory()
        if inspect.isawaitable(produced):
            produced = await produced
        return produced.__aiter__()

    async def _close(self, state: RetryState) -> None:
        upstream, state.upstream = state.upstream, None
        if upstream is None:
            return
        aclose = getattr(upstream, "aclose", None)
        if aclose is not None:
            await aclose()

    def _finish(
        self,
        state: RetryState,
        outcome: AttemptOutcome,
        error: BaseException | None = None,
    ) -> None:
        attempt = state.finish(outcome, error)
        if self.record_metrics:
            metrics.sequence_attempts_total.labels(
                sequence=self.name, outcome=outcome.value
            ).inc()
        if self.on_attempt is not None:
            self.on_attempt(attempt)


def with_retry(
    schedule: Schedule | Iterable[float],
    factory: SequenceFactory[T],
    **options,
) -> RetryingSequence[T]:
    """
    Wrap ``factory`` so its sequence is retried per ``schedule``.

    Args:
        schedule: Delays before attempts 2, 3, ... (empty means no retry)
        factory: Produces a fresh async sequence on every call
        **options: Keyword options of RetryingSequence (timer, retry_on, ...)

    Returns:
        RetryingSequence that can be iterated or subscribed any number of times
    """
    return RetryingSequence(schedule, factory, **options)
