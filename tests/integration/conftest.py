"""Integration test fixtures.

Integration tests run against the real event-loop clock, so delays here
are kept to a few milliseconds.
"""

import pytest

from sequence_retry.sequence.timers import LoopTimer


@pytest.fixture
def loop_timer() -> LoopTimer:
    return LoopTimer()
