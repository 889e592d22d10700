"""Structured logging — Routes the store's stdlib loggers through structlog.

Modules and store instances write to plain ``logging`` loggers under the
``elastore`` root. ``setup_logging`` attaches a single handler to that root
whose ``structlog.stdlib.ProcessorFormatter`` renders every record, ours and
structlog's own, as JSON lines or console output.
"""

from __future__ import annotations

import logging
import sys
from typing import IO, TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from elastore.config.settings import ObservabilitySettings

ROOT_LOGGER = "elastore"
HANDLER_NAME = "elastore.structlog"


def _pre_chain() -> list:
    """Processors applied to stdlib records before rendering."""
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]


def setup_logging(settings: ObservabilitySettings | None = None, stream: IO[str] | None = None) -> logging.Handler:
    """Render ``elastore`` logs through structlog.

    Calling it again replaces the previously installed handler.

    Args:
        settings: Observability settings. Uses defaults if None.
        stream: Output stream, stdout by default.

    Returns:
        The installed handler.
    """
    log_level = (settings.log_level if settings else "info").upper()
    log_format = settings.log_format if settings else "json"

    if log_format == "console":
        render = [structlog.dev.ConsoleRenderer()]
    else:
        render = [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *_pre_chain(),
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.UnicodeDecoder(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.set_name(HANDLER_NAME)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=_pre_chain(),
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, *render],
        )
    )

    root = logging.getLogger(ROOT_LOGGER)
    for existing in list(root.handlers):
        if existing.get_name() == HANDLER_NAME:
            root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(getattr(logging, log_level, logging.INFO))
    return handler


def get_store_logger(namespace: str) -> logging.Logger:
    """Return the logger a store instance writes to.

    Trace-level messages are emitted at ``DEBUG``.
    """
    return logging.getLogger(f"{ROOT_LOGGER}.{namespace}")
