"""
utils/logging.py — structlog setup for foodstats.

Events are written to stderr through the stdlib logging module, so
`foodstats query` can print its result table on stdout undisturbed.
LOG_FORMAT picks the renderer: "json" for one object per line, "console"
for aligned key=value output.

    from foodstats_pipeline.utils.logging import configure_logging, get_logger

    configure_logging(log_level="DEBUG")
    log = get_logger(__name__, measure="quantity")
    log.info("load_start", table="fact_quantity", total_rows=6)
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

from foodstats_shared.config import settings


def configure_logging(
    log_level: str | None = None,
    log_format: str | None = None,
) -> None:
    """
    Route structlog events to stderr at the requested level.

    Arguments left as None fall back to settings.log_level and
    settings.log_format. Safe to call again; the last call wins.
    """
    level = (log_level or settings.log_level).upper()
    fmt = log_format or settings.log_format
    threshold = logging.getLevelName(level)
    if not isinstance(threshold, int):
        threshold = logging.INFO

    # force: each call rebinds to the current sys.stderr
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=threshold,
        force=True,
    )

    if fmt == "json":
        renderer: Any = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(threshold),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str, **initial_values: Any) -> structlog.BoundLogger:
    """Logger for module `name`, pre-bound with initial_values."""
    logger = structlog.get_logger(name)
    if initial_values:
        logger = logger.bind(**initial_values)
    return logger  # type: ignore[return-value]
