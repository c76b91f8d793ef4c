"""Structured logging configuration.

Human-readable console output by default, JSON lines when
SELECTEST_LOG_FORMAT=json. Logs go to stderr so stdout stays free for
the underlying build tool.
"""

import functools
import logging
import sys
from typing import Any, Optional

import structlog
from structlog.types import FilteringBoundLogger, Processor

from selectest.config import Settings, get_settings


def add_run_context(
    logger: logging.Logger,
    method_name: str,
    event_dict: dict[str, Any],
    *,
    environment: str,
) -> dict[str, Any]:
    """Tag every entry with the component and environment."""
    event_dict.setdefault("component", "selectest")
    event_dict["environment"] = environment
    return event_dict


def configure_logging(settings: Optional[Settings] = None) -> None:
    """Configure structlog from settings."""
    settings = settings or get_settings()
    level = logging.getLevelName(settings.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        functools.partial(add_run_context, environment=settings.environment),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if settings.log_format == "json":
        processors: list[Processor] = [
            *shared_processors,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = [
            *shared_processors,
            structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )


def get_logger(name: Optional[str] = None) -> FilteringBoundLogger:
    """Get a structured logger instance.

    Example:
        logger = get_logger(__name__)
        logger.info("Classified targets", hits=2, pending=1)
    """
    return structlog.get_logger(name)
