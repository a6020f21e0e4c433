"""Logging configuration for hotelmatch.

Console output is the default for interactive CLI runs. The HTTP server is
usually run under a process manager, so ``json`` output (one object per line)
can be selected with ``--log-format json`` or ``HOTELMATCH_LOG_FORMAT=json``.
"""

import logging
import os

import structlog

LOG_FORMATS = ("console", "json")


def build_processors(log_format: str = "console") -> list:
    """Processor chain shared by both output formats; only the renderer differs."""
    if log_format not in LOG_FORMATS:
        raise ValueError(f"unknown log format: {log_format!r}")

    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]
    if log_format == "json":
        # Non-JSON values such as datetimes render via str()
        processors.append(structlog.processors.JSONRenderer(default=str))
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=os.environ.get("NO_COLOR") is None))
    return processors


def configure_logging(level: str | None = None, log_format: str | None = None) -> None:
    """Configure structlog on top of stdlib logging.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR). If None, reads from
               LOG_LEVEL env var, defaulting to INFO.
        log_format: ``console`` or ``json``. If None, reads from
               HOTELMATCH_LOG_FORMAT, defaulting to console.
    """
    log_level = (level or os.environ.get("LOG_LEVEL", "INFO")).upper()
    numeric_level = getattr(logging, log_level, logging.INFO)
    log_format = (log_format or os.environ.get("HOTELMATCH_LOG_FORMAT", "console")).lower()

    logging.basicConfig(
        format="%(message)s",
        level=numeric_level,
    )

    structlog.configure(
        processors=build_processors(log_format),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
