"""
Logging Setup - Speech Coach Scoring Engine
speechcoach/core/logging.py

Configures stdlib logging and structlog from LOG_LEVEL / LOG_FORMAT.
Scoring modules log through structlog.get_logger(__name__); repositories
and services use logging.getLogger(__name__). Both end up on the same root
handler.
"""

import logging
import sys

import structlog

from speechcoach.config import Settings


def configure_logging(settings: Settings) -> None:
    """Configure stdlib logging and structlog once at startup."""
    level = getattr(logging, settings.LOG_LEVEL)

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=level,
        force=True,
    )

    if settings.LOG_FORMAT == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
