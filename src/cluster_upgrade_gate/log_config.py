"""structlog configuration for hosts embedding the gate."""

from __future__ import annotations

import logging
import os
import sys

import structlog


def configure_logging(level: str | None = None) -> None:
    """Configure structlog for console output on a TTY and JSON otherwise, to stderr.

    The level defaults to ``CLUSTER_UPGRADE_GATE_LOG_LEVEL`` or ``INFO``.
    """
    name = (level or os.environ.get("CLUSTER_UPGRADE_GATE_LOG_LEVEL", "INFO")).upper()
    numeric = logging.getLevelNamesMapping().get(name)
    if numeric is None:
        msg = f"Invalid log level: {name!r}."
        raise ValueError(msg)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer() if sys.stderr.isatty() else structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(numeric),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )
