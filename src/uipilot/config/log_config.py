"""Logging configuration shared by the CLI commands.

structlog renders each event and hands it to the standard library logger,
so the optional log file configured through basicConfig receives it too.
"""

import logging
import os

import structlog


def setup_logging(
    debug: bool = False, log_file: str | None = None, log_level: str = "WARNING"
) -> None:
    """Configure structlog for console or JSON output."""
    debug = debug or os.getenv("UIPILOT_DEBUG", "").lower() in ("1", "true", "yes")
    level = logging.DEBUG if debug else getattr(logging, log_level.upper(), logging.WARNING)
    logging.basicConfig(level=level, format="%(message)s", filename=log_file)

    structlog.configure(
        processors=[
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer() if debug else structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
