"""Shared test fixtures and configuration for all tests.

This conftest.py provides common fixtures used across unit and integration tests.
"""

import pytest

from sequence_retry.config import Settings
from sequence_retry.retry.schedule import Schedule


@pytest.fixture
def test_settings() -> Settings:
    """Test settings with safe defaults for local testing.

    Override specific settings in individual tests as needed:
        def test_something(test_settings):
            test_settings.RETRY_SCHEDULE = [0.0]
    """
    return Settings(
        # === Application ===
        APP_NAME="sequence-retry (Test)",
        DEBUG=True,
        LOG_LEVEL="DEBUG",
        ENVIRONMENT="development",

        # === Retry ===
        RETRY_SCHEDULE=[1.0, 1.0, 2.0],

        # === Monitoring ===
        PROMETHEUS_ENABLED=False,  # Disable metrics in tests unless explicitly needed
    )


@pytest.fixture
def tutorial_schedule() -> Schedule:
    """The 1s, 1s, 2s schedule used throughout the retry scenarios."""
    return Schedule((1, 1, 2))
