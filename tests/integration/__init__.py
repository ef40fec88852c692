"""
Integration tests for sequence-retry.

Tests cover:
- Real event-loop delays between attempts
- Timeouts and cancellation against pending timers
- Configured schedules driving push-style subscriptions
"""
