"""Structured logging for tagmatch.

Log records are rendered by structlog and written by the ``tagmatch``
standard library logger to stderr (and optionally a file), so the result
that ``tagmatch check`` prints on stdout is never mixed with log lines.
"""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING, TextIO

import structlog
from structlog.types import Processor

if TYPE_CHECKING:
    from tagmatch.config import LoggingConfig

LOGGER_NAME = "tagmatch"


def _renderer(log_format: str, stream: TextIO) -> list[Processor]:
    if log_format == "json":
        return [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    return [
        structlog.dev.ConsoleRenderer(
            colors=stream.isatty(),
            exception_formatter=structlog.dev.plain_traceback,
        )
    ]


def _replace_handlers(logger: logging.Logger, handlers: list[logging.Handler]) -> None:
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    for handler in handlers:
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)


def setup_logging(config: LoggingConfig | None = None, stream: TextIO | None = None) -> None:
    """Configure logging for the tagmatch package.

    Safe to call repeatedly: each call replaces the handlers installed by
    the previous one instead of adding to them.

    Args:
        config: Logging configuration. Defaults to ``LoggingConfig()``.
        stream: Where to write log lines. Defaults to the current stderr.
    """
    if config is None:
        from tagmatch.config import LoggingConfig

        config = LoggingConfig()
    if stream is None:
        stream = sys.stderr

    level = getattr(logging, config.level)

    handlers: list[logging.Handler] = [logging.StreamHandler(stream)]
    if config.file is not None:
        config.file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(config.file))

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False
    _replace_handlers(logger, handlers)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            *_renderer(config.format, stream),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        # Module-level loggers must pick up reconfiguration on the next CLI run
        cache_logger_on_first_use=False,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger, normally ``get_logger(__name__)``."""
    return structlog.get_logger(name)


__all__ = ["LOGGER_NAME", "setup_logging", "get_logger"]
