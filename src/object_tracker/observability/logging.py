"""Structured logging using structlog on top of the stdlib `object_tracker` logger.

Library loggers are filtered by the stdlib level before any rendering, so
they stay silent until an application opts in with `setup_logging()` or
configures the `object_tracker` logger itself.
"""

from __future__ import annotations

import logging
import sys

import structlog

ROOT_LOGGER = "object_tracker"

_PROCESSORS: list[structlog.typing.Processor] = [
    structlog.stdlib.filter_by_level,
    structlog.contextvars.merge_contextvars,
    structlog.processors.add_log_level,
    structlog.processors.StackInfoRenderer(),
    structlog.dev.set_exc_info,
    structlog.processors.TimeStamper(fmt="iso", utc=True, key="ts"),
    structlog.processors.JSONRenderer(),
]


def setup_logging(level: str = "info") -> None:
    """Send JSON log lines from the library to stderr at the given level."""
    log_level = getattr(logging, level.upper(), logging.INFO)

    root = logging.getLogger(ROOT_LOGGER)
    root.setLevel(log_level)
    if not any(getattr(h, "_object_tracker", False) for h in root.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter("%(message)s"))
        handler._object_tracker = True  # type: ignore[attr-defined]
        root.addHandler(handler)


def get_logger(component: str) -> structlog.stdlib.BoundLogger:
    """Get a logger bound with a component name."""
    return structlog.wrap_logger(  # type: ignore[return-value]
        logging.getLogger(f"{ROOT_LOGGER}.{component}"),
        processors=_PROCESSORS,
        wrapper_class=structlog.stdlib.BoundLogger,
        component=component,
    )
