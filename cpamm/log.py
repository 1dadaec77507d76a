"""structlog configuration for long-running entry points."""

import logging

import structlog


def configure_logging(level: str = "INFO") -> None:
    """Configure structlog with level filtering, ISO timestamps and console output."""
    log_level = logging.getLevelName(level.upper())
    if not isinstance(log_level, int):
        log_level = logging.INFO
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
    )
