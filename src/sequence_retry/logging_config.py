"""Structured logging setup for applications embedding sequence-retry.

The library itself only emits events through ``structlog.get_logger``;
nothing is configured at import time. Host applications call
`configure_logging()` once at startup, which defaults to the LOG_LEVEL,
ENVIRONMENT and DEBUG settings:

    >>> from sequence_retry import configure_logging
    >>> configure_logging()  # uses settings
    >>> configure_logging(log_level="WARNING", environment="production")

Production renders one JSON object per line; development renders
human-readable console lines.
"""

import logging
import sys

import structlog
from structlog.types import EventDict, WrappedLogger

from sequence_retry.config import Settings
from sequence_retry.config import settings as default_settings

PACKAGE_LOGGER = "sequence_retry"


class AppContext:
    """Processor stamping every event with the application name."""

    def __init__(self, app_name: str):
        self.app_name = app_name

    def __call__(
        self, logger: WrappedLogger, method_name: str, event_dict: EventDict
    ) -> EventDict:
        event_dict.setdefault("app", self.app_name)
        return event_dict


def configure_logging(
    log_level: str | None = None,
    environment: str | None = None,
    settings: Settings | None = None,
) -> None:
    """Configure structlog and the stdlib root logger.

    Args:
        log_level: Root logging level; defaults to settings.LOG_LEVEL
        environment: "production" for JSON output, anything else for
            console output; defaults to settings.ENVIRONMENT
        settings: Settings to read defaults from (the global instance if omitted)

    With DEBUG enabled the ``sequence_retry`` logger is opened up to
    DEBUG regardless of the root level, which surfaces per-attempt
    events (attempt starts, transient failures, cancellations).
    """
    settings = settings or default_settings
    log_level = log_level or settings.LOG_LEVEL
    environment = environment or settings.ENVIRONMENT

    log_level_int = getattr(logging, log_level.upper(), logging.INFO)
    is_production = environment.lower() == "production"

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        AppContext(settings.APP_NAME),
    ]

    if is_production:
        shared_processors.append(structlog.processors.format_exc_info)
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        # ConsoleRenderer formats exc_info itself
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())

    structlog.configure(
        processors=shared_processors
        + [
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processor=renderer,
        foreign_pre_chain=shared_processors,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    # Clear existing handlers to avoid duplicates
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(log_level_int)

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(logging.DEBUG if settings.DEBUG else logging.NOTSET)

    logging.getLogger("asyncio").setLevel(logging.WARNING)

    structlog.get_logger(__name__).info(
        "Logging configured",
        log_level=log_level,
        environment=environment,
        renderer="json" if is_production else "console",
        debug=settings.DEBUG,
    )
