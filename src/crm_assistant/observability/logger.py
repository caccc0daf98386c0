"""Structured logging configuration using structlog.

Provides JSON-formatted logs with correlation ID and context.
"""

import logging
import sys

import structlog
from structlog.typing import EventDict, Processor

from crm_assistant.observability.constants import SERVICE_NAME
from crm_assistant.observability.context import get_correlation_id


def add_correlation_id(
    logger: logging.Logger,  # noqa: ARG001
    method_name: str,  # noqa: ARG001
    event_dict: EventDict,
) -> EventDict:
    """Structlog processor to add correlation ID to log entries."""
    correlation_id = get_correlation_id()
    if correlation_id:
        event_dict["correlation_id"] = correlation_id
    return event_dict


def add_service_name(
    logger: logging.Logger,  # noqa: ARG001
    method_name: str,  # noqa: ARG001
    event_dict: EventDict,
) -> EventDict:
    """Structlog processor to add service name to log entries."""
    event_dict["service"] = SERVICE_NAME
    return event_dict


def configure_logging(
    log_level: str = "INFO",
    log_format: str = "json",
    development_mode: bool = False,
) -> None:
    """Configure structlog for the application.

    Args:
        log_level: The log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_format: Output format - "json" for production, "console" for development.
        development_mode: If True, uses colored console output.
    """
    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        add_service_name,
        add_correlation_id,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if log_format == "console" or development_mode:
        processors: list[Processor] = [
            *shared_processors,
            structlog.dev.ConsoleRenderer(colors=True),
        ]
    else:
        processors = [
            *shared_processors,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(ensure_ascii=False),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper()),
        force=True,
    )

    # Reduce noise from third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance.

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.info("source.fetch.completed", source="leads", total=3)
    """
    return structlog.get_logger(name)
