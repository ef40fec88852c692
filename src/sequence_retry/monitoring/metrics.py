"""Custom Prometheus metrics for retrying sequences.

Metrics are registered in the default prometheus_client registry; expose
them with prometheus_client's HTTP server or ASGI app in the host process.
Alert rules should be configured for:
- sequence_exhausted_total (sequences giving up after their last retry)
- sequence_retries_total (high retry rate indicates an unstable upstream)
"""

from prometheus_client import Counter, Histogram

# === Attempt Metrics ===

sequence_attempts_total = Counter(
    "sequence_attempts_total",
    "Total finished attempts by sequence and outcome",
    ["sequence", "outcome"],
)
"""
Finished attempts counter.

Labels:
- sequence: Name of the retrying sequence (defaults to the factory name)
- outcome: success, failure, cancelled, aborted (consumer raised into the sequence)
"""

# === Retry Metrics ===

sequence_retries_total = Counter(
    "sequence_retries_total",
    "Total retries scheduled after a transient failure",
    ["sequence"],
)

sequence_retry_delay_seconds = Histogram(
    "sequence_retry_delay_seconds",
    "Delay waited before each retry in seconds",
    ["sequence"],
    buckets=[0.0, 0.1, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0, 60.0],
)

# === Terminal Metrics ===

sequence_exhausted_total = Counter(
    "sequence_exhausted_total",
    "Total sequences that failed after exhausting their schedule",
    ["sequence", "error_type"],
)
"""
Exhausted sequences counter.

Labels:
- sequence: Name of the retrying sequence
- error_type: Class name of the final failure

Alert thresholds:
- WARN: any increase for sequences expected to be long-lived
"""

sequence_cancellations_total = Counter(
    "sequence_cancellations_total",
    "Total executions stopped by cancellation",
    ["sequence"],
)
