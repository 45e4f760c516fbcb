"""Structured logging setup.

Modules log through ``structlog.get_logger(__name__)`` with event-style
messages (``logger.debug("rows_selected", table="authors", count=3)``).
Applications call :func:`configure_logging` once at startup; without it
structlog's defaults apply.

Usage:
    from row_mapper.core.log import configure_logging

    configure_logging(level="DEBUG")
"""

from __future__ import annotations

import logging
import sys

import structlog


def configure_logging(level: str = "INFO", json_logs: bool = False) -> None:
    """Configure structlog rendering and filtering.

    Args:
        level: Logging level name (e.g. "DEBUG", "INFO", "WARNING").
        json_logs: Render one JSON object per event instead of console output.
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        raise ValueError(f"Unknown log level: {level}")

    renderer: structlog.types.Processor
    if json_logs:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )
