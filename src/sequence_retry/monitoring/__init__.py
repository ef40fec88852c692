"""Monitoring and metrics instrumentation for retrying sequences.

Exports custom Prometheus metrics for operational monitoring and alerting.
"""

from sequence_retry.monitoring.metrics import (
    sequence_attempts_total,
    sequence_cancellations_total,
    sequence_exhausted_total,
    sequence_retries_total,
    sequence_retry_delay_seconds,
)

__all__ = [
    "sequence_attempts_total",
    "sequence_retries_total",
    "sequence_retry_delay_seconds",
    "sequence_exhausted_total",
    "sequence_cancellations_total",
]
