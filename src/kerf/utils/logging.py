"""Structured logging configuration using structlog.

Correlation fields tie every log line of a run to the batch, the input
file, and the entity being processed:

    batch_id      one CLI invocation
    source        where the entities came from (usually a file path)
    entity_index  position of the entity under inspection

They live in structlog's context variables, so they follow the current
thread or task and are merged into each event by ``merge_contextvars``.
"""

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TextIO, cast

import structlog
from structlog.types import Processor

from kerf.config import settings

_CORRELATION_KEYS = ("batch_id", "source", "entity_index")


def set_correlation_context(
    batch_id: str | None = None,
    source: str | None = None,
    entity_index: int | None = None,
) -> None:
    """Bind correlation fields for the current context.

    Fields passed as None keep whatever value they already had.
    """
    fields = {"batch_id": batch_id, "source": source, "entity_index": entity_index}
    structlog.contextvars.bind_contextvars(
        **{key: value for key, value in fields.items() if value is not None}
    )


def clear_correlation_context() -> None:
    """Remove all correlation fields from the current context."""
    structlog.contextvars.unbind_contextvars(*_CORRELATION_KEYS)


@contextmanager
def entity_context(entity_index: int) -> Iterator[None]:
    """Tag log events inside the block with an entity index.

    The previous index (if any) is restored on exit.

    Example:
        >>> for index, entity in enumerate(entities):
        ...     with entity_context(index):
        ...         check(entity)
    """
    with structlog.contextvars.bound_contextvars(entity_index=entity_index):
        yield


def configure_logging(
    level: str | None = None,
    log_format: str | None = None,
    stream: TextIO | None = None,
) -> None:
    """Configure structlog and the stdlib root logger.

    Args:
        level: Log level name. Defaults to settings.LOG_LEVEL.
        log_format: "json" or "console". Defaults to settings.LOG_FORMAT.
        stream: Destination for log lines. Defaults to stdout; the CLI
            passes stderr when stdout carries a JSON report.
    """
    level = level or settings.LOG_LEVEL
    log_format = log_format or settings.LOG_FORMAT

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    renderer: Processor
    if log_format == "json":
        shared_processors.append(structlog.processors.format_exc_info)
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=True)

    structlog.configure(
        processors=[*shared_processors, renderer],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        # Module-level loggers must pick up a later reconfiguration.
        cache_logger_on_first_use=False,
    )

    # force: drop handlers bound to an earlier stream
    logging.basicConfig(
        format="%(message)s",
        stream=stream or sys.stdout,
        level=getattr(logging, level.upper()),
        force=True,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Return a structlog logger bound to ``name``."""
    return cast(structlog.stdlib.BoundLogger, structlog.get_logger(name))
