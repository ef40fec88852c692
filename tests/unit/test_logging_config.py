"""
Unit tests for structlog configuration.
"""

import logging

import pytest
import structlog

from sequence_retry.config import Settings
from sequence_retry.logging_config import PACKAGE_LOGGER, AppContext, configure_logging


@pytest.fixture(autouse=True)
def restore_logging():
    root = logging.getLogger()
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    handlers, level, package_level = list(root.handlers), root.level, package_logger.level
    yield
    for handler in root.handlers[:]:
        if handler not in handlers:
            root.removeHandler(handler)
    root.setLevel(level)
    package_logger.setLevel(package_level)
    structlog.reset_defaults()


def last_line(capsys) -> str:
    return capsys.readouterr().out.strip().splitlines()[-1]


def test_app_context_uses_configured_name():
    event = AppContext("ticker-service")(None, "info", {"event": "hello"})

    assert event == {"event": "hello", "app": "ticker-service"}


def test_production_logging_renders_json(capsys, test_settings: Settings):
    configure_logging(log_level="warning", environment="production", settings=test_settings)

    structlog.get_logger("sequence_retry.test").warning("Retry schedule exhausted", attempts=3)

    line = last_line(capsys)
    assert '"event": "Retry schedule exhausted"' in line
    assert '"attempts": 3' in line
    assert '"app": "sequence-retry (Test)"' in line
    assert logging.getLogger().level == logging.WARNING


def test_development_logging_renders_console_line(capsys, test_settings: Settings):
    """Test the default development path renders a readable line, exceptions included."""
    test_settings.DEBUG = False
    configure_logging(settings=test_settings)

    try:
        raise ConnectionResetError("feed dropped")
    except ConnectionResetError:
        structlog.get_logger("sequence_retry.test").exception("Upstream failed", attempt=2)

    out = capsys.readouterr().out
    assert "Upstream failed" in out
    assert "attempt" in out and "2" in out
    assert "ConnectionResetError" in out
    assert "feed dropped" in out


def test_defaults_come_from_settings(capsys, test_settings: Settings):
    """Test level and environment default to LOG_LEVEL and ENVIRONMENT."""
    test_settings.LOG_LEVEL = "ERROR"
    test_settings.ENVIRONMENT = "production"
    test_settings.DEBUG = False

    configure_logging(settings=test_settings)
    structlog.get_logger("other.module").error("Boom", code=7)

    assert logging.getLogger().level == logging.ERROR
    assert '"code": 7' in last_line(capsys)


def test_debug_setting_opens_package_logger(capsys, test_settings: Settings):
    """Test DEBUG surfaces per-attempt events from the package above the root level."""
    test_settings.LOG_LEVEL = "WARNING"
    test_settings.ENVIRONMENT = "production"
    test_settings.DEBUG = True

    configure_logging(settings=test_settings)
    structlog.get_logger("sequence_retry.retry.engine").debug("Starting attempt", attempt=1)
    structlog.get_logger("other.module").debug("Hidden")

    out = capsys.readouterr().out
    assert "Starting attempt" in out
    assert "Hidden" not in out
    assert logging.getLogger(PACKAGE_LOGGER).level == logging.DEBUG


def test_unknown_level_falls_back_to_info(test_settings: Settings):
    configure_logging(log_level="chatty", environment="development", settings=test_settings)

    assert logging.getLogger().level == logging.INFO
    assert len(logging.getLogger().handlers) == 1


def test_configure_logging_is_exported():
    import sequence_retry

    assert sequence_retry.configure_logging is configure_logging
    assert "configure_logging" in sequence_retry.__all__
