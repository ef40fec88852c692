"""
Push-style subscriptions over async sequences.

Any AsyncIterable can be driven into an Observer: each value is pushed to
`on_next`, followed by exactly one of `on_completed` or `on_error`. The
returned Subscription can be cancelled at any point, after which the
observer hears nothing more and the source iterator is closed.

Usage:
    >>> subscription = subscribe(source, CallbackObserver(next_handler=print))
    >>> ...
    >>> subscription.cancel()
"""

import asyncio
from collections.abc import AsyncIterable, AsyncIterator, Callable
from dataclasses import dataclass
from typing import Any, Generic, Protocol, TypeVar

import structlog

from sequence_retry.retry.exceptions import SubscriptionError

logger = structlog.get_logger(__name__)

T = TypeVar("T")
T_contra = TypeVar("T_contra", contravariant=True)


class Observer(Protocol[T_contra]):
    """
    Protocol for consumers of a pushed sequence.

    A sequence delivers zero or more `on_next` calls followed by exactly
    one terminal call, `on_completed` or `on_error`, unless the
    subscription is cancelled first.
    """

    def on_next(self, value: T_contra) -> None: ...

    def on_error(self, error: BaseException) -> None: ...

    def on_completed(self) -> None: ...


@dataclass
class CallbackObserver(Generic[T]):
    """Observer assembled from optional callables; missing ones are no-ops."""

    next_handler: Callable[[T], Any] | None = None
    error_handler: Callable[[BaseException], Any] | None = None
    completed_handler: Callable[[], Any] | None = None

    def on_next(self, value: T) -> None:
        if self.next_handler is not None:
            self.next_handler(value)

    def on_error(self, error: BaseException) -> None:
        if self.error_handler is not None:
            self.error_handler(error)

    def on_completed(self) -> None:
        if self.completed_handler is not None:
            self.completed_handler()


class Subscription(Generic[T]):
    """
    Handle on an active push-style subscription.

    The source is pulled by a task on the running event loop. Cancelling
    runs the optional ``on_cancel`` hook synchronously, then cancels the
    task; the source iterator is closed as the task unwinds.

    Attributes:
        source: The sequence being driven
        observer: Receiver of values and the terminal signal
    """

    def __init__(
        self,
        source: AsyncIterable[T],
        observer: Observer[T],
        on_cancel: Callable[[], None] | None = None,
    ):
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            raise SubscriptionError("subscribe() requires a running event loop") from None

        self.source = source
        self.observer = observer
        self._on_cancel = on_cancel
        self._cancelled = False
        self._task = loop.create_task(self._drive())

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def closed(self) -> bool:
        """True once the subscription has terminated or been cancelled."""
        return self._cancelled or self._task.done()

    def cancel(self) -> None:
        """Stop delivery; idempotent, and a no-op once the sequence has terminated."""
        if self.closed:
            return
        self._cancelled = True
        if self._on_cancel is not None:
            self._on_cancel()
        self._task.cancel()
        logger.debug("subscription_cancelled", source=type(self.source).__name__)

    async def wait(self) -> None:
        """
        Wait until the subscription has finished for any reason.

        Raises:
            Exception: Whatever an observer callback raised while delivering
        """
        try:
            await asyncio.shield(self._task)
        except asyncio.CancelledError:
            if not self._task.cancelled():
                raise

    async def _drive(self) -> None:
        iterator = self.source.__aiter__()
        try:
            while True:
                try:
                    value = await iterator.__anext__()
                except StopAsyncIteration:
                    if not self._cancelled:
                        self.observer.on_completed()
                    return
                except Exception as e:
                    if not self._cancelled:
                        self.observer.on_error(e)
                    return

                if self._cancelled:
                    return
                try:
                    self.observer.on_next(value)
                except Exception as e:
                    await self._abort(iterator, e)
                    raise
        finally:
            aclose = getattr(iterator, "aclose", None)
            if aclose is not None:
                await aclose()

    async def _abort(self, iterator: AsyncIterator[T], error: Exception) -> None:
        """Throw an observer failure into the source so it can tell it from a cancel."""
        athrow = getattr(iterator, "athrow", None)
        if athrow is None:
            return
        try:
            await athrow(error)
        except StopAsyncIteration:
            pass
        except Exception as e:
            if e is not error:
                raise


def subscribe(
    source: AsyncIterable[T],
    observer: Observer[T],
    on_cancel: Callable[[], None] | None = None,
) -> Subscription[T]:
    """
    Start pushing ``source`` into ``observer``.

    Args:
        source: Any async iterable
        observer: Receiver of values and the terminal signal
        on_cancel: Called synchronously when the subscription is cancelled

    Returns:
        Active Subscription

    Raises:
        SubscriptionError: No event loop is running
    """
    return Subscription(source, observer, on_cancel=on_cancel)
