"""Structured logging for flatdb.

Events go to stderr so they never mix with rows a shell prints to stdout.
Keys used across the code base: ``database``, ``table``, ``operation``,
``rule`` and ``field``.
"""

from __future__ import annotations

import logging
import sys
from contextlib import contextmanager
from typing import Any, Generator

import structlog
from structlog.types import EventDict, Processor, WrappedLogger


def _stamp_service(service_name: str) -> Processor:
    def processor(_: WrappedLogger, __: str, event_dict: EventDict) -> EventDict:
        event_dict.setdefault("service", service_name)
        return event_dict

    return processor


def setup_logging(
    level: str = "INFO",
    log_format: str = "json",
    service_name: str = "flatdb",
) -> None:
    """
    Configure structlog for flatdb.

    Args:
        level: Minimum level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: 'json' for one object per line, 'console' for humans
        service_name: Value of the ``service`` key on every event
    """
    threshold = logging.getLevelName(level.upper())
    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=threshold)

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        _stamp_service(service_name),
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", key="ts"),
        structlog.processors.format_exc_info,
    ]
    if log_format == "console":
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))
    else:
        processors.append(structlog.processors.JSONRenderer(sort_keys=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(threshold),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None, **initial_context: Any) -> structlog.BoundLogger:
    """Return a logger, optionally bound to some initial keys."""
    logger = structlog.get_logger(name)
    return logger.bind(**initial_context) if initial_context else logger


@contextmanager
def log_context(**values: Any) -> Generator[None, None, None]:
    """Bind keys to every event logged inside the block, on this thread."""
    bound = {key: value for key, value in values.items() if value is not None}
    with structlog.contextvars.bound_contextvars(**bound):
        yield
