"""Logging configuration: structlog on top of the standard library."""

from __future__ import annotations

import logging
import sys

import structlog

from bookstore.infrastructure.config import Settings


def configure_logging(settings: Settings) -> None:
    """Configure all logging for the application. Called once by the CLI."""
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=settings.LOG_LEVEL,
        force=True,
    )
    logging.getLogger("sqlalchemy").setLevel(logging.WARNING)

    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        structlog.contextvars.merge_contextvars,
    ]

    if settings.ENV in ["production", "staging"]:
        processors.append(structlog.processors.format_exc_info)
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )
