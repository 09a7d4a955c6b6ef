"""Structured logging setup.

Logs go to stderr so stdout stays free for the JSON report. Without ``-v``
only warnings and errors are shown; ``-v`` adds INFO and ``-vv`` adds DEBUG,
which includes per-chart parse failures.
"""

from __future__ import annotations

import logging
import sys

import structlog


def _verbose_to_level(verbose: int) -> int:
    if verbose <= 0:
        return logging.WARNING
    if verbose == 1:
        return logging.INFO
    return logging.DEBUG


def configure_logging(verbose: int = 0, json_output: bool = False) -> None:
    """Route structlog through stdlib logging to stderr.

    Args:
        verbose: Verbosity count from the CLI.
        json_output: Render log lines as JSON instead of console text.
    """
    logging.root.handlers.clear()
    structlog.reset_defaults()

    level = _verbose_to_level(verbose)
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    logging.root.addHandler(handler)
    logging.root.setLevel(level)

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if json_output:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=shared_processors + [renderer],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
