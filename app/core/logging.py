"""
Structured logging configuration using structlog.

Provides JSON-formatted logs with contextual information for every
catalog query served by the API.

Features:
- JSON structured logging for production
- Pretty console logging for development
- Request ID tracking
- Context binding (image_id, sort_order, etc.)
"""

import logging
import sys
from contextlib import AbstractContextManager
from contextvars import ContextVar
from typing import Any, cast

import structlog
from structlog.types import EventDict, Processor

from app.config import settings

# Context variable for request tracking
request_id_ctx: ContextVar[str | None] = ContextVar("request_id", default=None)


def add_context_info(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Add contextual information to log records."""
    request_id = request_id_ctx.get(None)
    if request_id:
        event_dict["request_id"] = request_id

    return event_dict


def configure_logging() -> None:
    """
    Configure structured logging for the application.

    In development: Pretty console output with colors
    In production: JSON-formatted logs for aggregation
    """
    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        add_context_info,
        structlog.processors.StackInfoRenderer(),
    ]

    if settings.ENVIRONMENT == "development":
        processors: list[Processor] = shared_processors + [
            structlog.dev.ConsoleRenderer(colors=True)
        ]
    else:
        processors = shared_processors + [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(logging.NOTSET),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, settings.LOG_LEVEL.upper()),
    )

    # Reduce noise from third-party libraries
    if settings.ENVIRONMENT != "development":
        logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """
    Get a logger instance with the given name.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured logger instance

    Example:
        logger = get_logger(__name__)
        logger.info("image_list_served", total_count=42, sort_order=3)
    """
    return cast(structlog.stdlib.BoundLogger, structlog.get_logger(name))


def set_request_context(request_id: str) -> None:
    """
    Set the request ID for the current request.

    Called by the request middleware so every log line emitted while
    serving a query carries the same request_id.
    """
    request_id_ctx.set(request_id)


def clear_request_context() -> None:
    """Clear context variables after request completes."""
    request_id_ctx.set(None)
    structlog.contextvars.clear_contextvars()


def bound_context(**kwargs: Any) -> AbstractContextManager[None]:
    """
    Bind context to every log emitted inside the `with` block.

    The keys are unbound again on exit (also when the block raises), so
    callers outside a request do not leak them into later log lines.

    Args:
        **kwargs: Key-value pairs to add to log context

    Example:
        with bound_context(image_id=1111822, sort_order=3):
            logger.info("image_position_requested")  # Includes image_id and sort_order
    """
    return structlog.contextvars.bound_contextvars(**kwargs)
