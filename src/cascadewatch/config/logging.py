"""Logging configuration using structlog."""

import logging
import sys

import structlog

from cascadewatch.config.settings import Settings, get_settings

# Chatty third-party loggers capped at WARNING unless running in debug
_NOISY_LOGGERS = ("web3", "websockets", "httpx", "httpcore")


def configure_logging(settings: Settings | None = None) -> None:
    """Configure structlog once at startup.

    JSON lines in production, coloured console output when ``DEBUG`` is set.
    """
    settings = settings or get_settings()
    level: int = getattr(logging, settings.log_level)

    renderer: structlog.typing.Processor = (
        structlog.dev.ConsoleRenderer() if settings.debug else structlog.processors.JSONRenderer()
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format="%(name)s %(levelname)s %(message)s", stream=sys.stdout, level=level)
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(level if settings.debug else max(level, logging.WARNING))
