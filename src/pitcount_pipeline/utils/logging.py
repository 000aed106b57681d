"""
utils/logging.py — structlog setup shared by the CLI and pipelines.

Log records go to stderr so the CLI's stdout carries only the run summary.
The renderer is picked by settings.log_format ("console" or "json").
Python warnings (JoinKeyUnresolvedWarning among them) are captured into the
stdlib "py.warnings" logger, which is rendered the same way.

Usage:
    from pitcount_pipeline.utils.logging import configure_logging, get_logger

    configure_logging()
    log = get_logger(__name__, pipeline="pit_report")
    log.info("union_complete", years=[2019, 2018], rows=798)
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

from pitcount_shared.config import settings


def _level(name: str) -> int:
    return logging.getLevelNamesMapping().get(name.upper(), logging.INFO)


def _renderer(fmt: str) -> Any:
    if fmt == "json":
        return structlog.processors.JSONRenderer(sort_keys=True)
    return structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())


def configure_logging(
    log_level: str | None = None,
    log_format: str | None = None,
) -> None:
    """
    Configure structlog and stdlib logging for one process.

    Safe to call more than once; the last call wins.

    Args:
        log_level:  Overrides settings.log_level.
        log_format: Overrides settings.log_format.
    """
    level = _level(log_level or settings.log_level)
    renderer = _renderer(log_format or settings.log_format)

    timestamper = structlog.processors.TimeStamper(fmt="iso", utc=True)
    pre_chain: list[Any] = [structlog.stdlib.add_log_level, timestamper]

    # stdlib records (including captured warnings) share the structlog renderer
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ], foreign_pre_chain=[structlog.stdlib.add_logger_name, *pre_chain])
    )
    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(level)
    logging.captureWarnings(True)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            *pre_chain,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str, **initial_values: Any) -> structlog.BoundLogger:
    """Return a structlog logger bound to its *name* and any *initial_values*."""
    return structlog.get_logger(name).bind(logger=name, **initial_values)  # type: ignore[return-value]
