"""
Module: logger.py
Description: Structured logging configuration for listbatch.

Configures structlog for JSON output. Provides consistent logging across
all modules with proper context and structured data.

Key Components:
- JSON output for log aggregation
- Timestamp and log level processors
- configure_logging(): Opt-in setup, level from settings.log_level
- get_logger() helper function

Dependencies: structlog, logging, datetime
Author: listbatch maintainers
"""

import logging
from datetime import datetime, timezone
from typing import Optional

import structlog

from ..config.settings import settings


def _add_timestamp(logger, method_name, event_dict):
    """
    Add ISO 8601 timestamp to log entries.

    Args:
        logger: Logger instance
        method_name: Log method name (info, error, etc.)
        event_dict: Current log event dictionary

    Returns:
        Updated event dictionary with timestamp
    """
    event_dict["timestamp"] = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
    return event_dict


def _add_log_level(logger, method_name, event_dict):
    """
    Add log level to event dictionary.

    Args:
        logger: Logger instance
        method_name: Log method name (info, error, etc.)
        event_dict: Current log event dictionary

    Returns:
        Updated event dictionary with level
    """
    event_dict["level"] = method_name.upper()
    return event_dict


def configure_logging(log_level: Optional[str] = None) -> None:
    """
    Configure structlog for JSON output.

    Not called on import: a host application's structlog setup stays in
    place unless the application opts into the JSON format by calling this
    once at startup.

    Args:
        log_level: Minimum level to emit; defaults to settings.log_level

    Raises:
        ValueError: If log_level is not a standard logging level

    Example:
        >>> configure_logging("DEBUG")
    """
    level = (log_level or settings.log_level).upper()
    if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
        raise ValueError(f"Invalid log level: {log_level}")

    structlog.configure(
        processors=[
            # Add timestamp and log level
            _add_timestamp,
            _add_log_level,
            # Add exception information
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        logger_factory=structlog.WriteLoggerFactory(),
        # Drop calls below the configured level before any processor runs
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(level)
        ),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.typing.FilteringBoundLogger:
    """
    Get a configured structlog logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger instance

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.info("Batch chunk committed", operation_count=3)
        {"operation_count": 3, "event": "Batch chunk committed", "timestamp": "2024-01-15T10:30:00Z", "level": "INFO"}
    """
    return structlog.get_logger(name)
