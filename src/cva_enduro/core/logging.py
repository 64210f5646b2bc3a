"""structlog setup shared by the worker and its scripts."""

from __future__ import annotations

import logging

import structlog


def verbosity_to_level(verbosity: int) -> int:
    """Map the configured verbosity to a stdlib logging level."""
    if verbosity <= 0:
        return logging.WARNING
    if verbosity == 1:
        return logging.INFO
    return logging.DEBUG


def configure_logging(debug: bool = False, verbosity: int = 0) -> None:
    """Configure structlog for console (debug) or JSON output."""
    renderer: structlog.typing.Processor
    if debug:
        renderer = structlog.dev.ConsoleRenderer()
    else:
        renderer = structlog.processors.JSONRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(verbosity_to_level(verbosity)),
        cache_logger_on_first_use=True,
    )
