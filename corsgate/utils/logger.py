"""Structured logging utilities for corsgate.

This module provides async-safe structured logging using structlog.
Per-request fields (method, path) are bound through structlog contextvars
by the CORS filter middleware, so every event logged while a decision is
being made carries them.
"""

import logging
import sys
import time
from typing import Any, Optional

import structlog
from structlog.types import EventDict, Processor


def add_timestamp(logger: logging.Logger, method_name: str, event_dict: EventDict) -> EventDict:
    """Add epoch timestamp to log entries."""
    event_dict["timestamp"] = time.time()
    return event_dict


def configure_logging(
    log_level: str = "INFO",
    json_output: bool = True
) -> None:
    """Configure structured logging for the application.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_output: If True, output JSON format. If False, use console format.
    """
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        add_timestamp,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if json_output:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.extend([
            structlog.dev.ConsoleRenderer(colors=True),
        ])

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, log_level.upper())
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str = "corsgate") -> structlog.stdlib.BoundLogger:
    """Get a configured logger instance.

    Args:
        name: Logger name (typically module name)

    Returns:
        Configured structlog logger
    """
    return structlog.get_logger(name)


def bind_request_context(**fields: Any) -> None:
    """Bind per-request fields to every subsequent log event in this context."""
    structlog.contextvars.bind_contextvars(**fields)


def clear_request_context(*keys: str) -> None:
    """Remove per-request fields bound by bind_request_context().

    Args:
        keys: Field names to unbind. All context is cleared if none are given.
    """
    if keys:
        structlog.contextvars.unbind_contextvars(*keys)
    else:
        structlog.contextvars.clear_contextvars()


def level_name(level: Optional[str]) -> str:
    """Normalise a user-supplied level name, falling back to INFO."""
    if not level:
        return "INFO"
    upper = level.strip().upper()
    if upper not in logging.getLevelNamesMapping():
        return "INFO"
    return upper


# Initialize logging with sensible defaults
# This will be reconfigured by main.py based on environment
configure_logging()
