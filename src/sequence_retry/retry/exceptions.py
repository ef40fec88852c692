"""
Exceptions raised by the retry combinator itself.

Failures produced by the wrapped sequences are never wrapped in these:
transient failures drive retries and the exhausted failure is re-raised
unchanged. These classes only cover misuse of the library.
"""


class SequenceRetryError(Exception):
    """
    Base exception for all sequence-retry errors.

    Allows catching any library-level error with a single except clause.
    """

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class InvalidScheduleError(SequenceRetryError, ValueError):
    """
    Raised when a schedule contains a negative or non-finite delay.
    """

    def __init__(self, index: int, delay: object):
        super().__init__(
            f"Invalid delay at schedule index {index}: delays must be finite and >= 0",
            details={"index": index, "delay": delay},
        )
        self.index = index
        self.delay = delay


class SubscriptionError(SequenceRetryError):
    """
    Raised when a subscription cannot be started.

    Subscriptions drive their source on the running event loop, so
    subscribing from synchronous code without a loop is an error.
    """
    pass
