"""
Merkle Commit - Logging Configuration
"""

import logging
import sys

import structlog

from merkle_commit.core.config import settings


def setup_logging(level: str | None = None, stream=None) -> None:
    """
    Configure structured logging.

    Args:
        level: Overrides settings.LOG_LEVEL
        stream: Output stream; the CLI logs to stderr so stdout stays clean
    """
    stream = stream or sys.stdout
    use_json = settings.ENV == "production"

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    if use_json:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=stream.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=stream,
        level=getattr(logging, (level or settings.LOG_LEVEL).upper()),
        force=True,
    )
