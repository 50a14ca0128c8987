"""
Logging utilities for periodmetrics.

Logging stays on the standard library. Tables and checks never configure
logging themselves: they take an optional `logger` and stay silent
without one.

- get_logger: a stream logger for notebooks, scripts and services
- format_change / log_changes: readable changed-values lists, e.g.

      beginningMRR@2023-33: None -> 10
"""

from __future__ import annotations

import logging
import sys
from typing import Optional, Sequence, TextIO, Union

from periodmetrics.periods import period_key

# Changed-values lists can be long after bulk loads; only the head is logged
MAX_LOGGED_CHANGES = 20


def get_logger(
    name: str = "periodmetrics",
    level: Union[int, str] = logging.INFO,
    stream: Optional[TextIO] = None,
    fmt: str = "%(message)s",
    datefmt: Optional[str] = None,
    propagate: bool = False,
) -> logging.Logger:
    """
    Return a logger writing to `stream` (stdout by default).

    Repeated calls for the same name and stream reconfigure the existing
    handler instead of adding another one. Table updates log at DEBUG, so
    pass level="DEBUG" to trace recomputation.

    Parameters
    ----------
    name:
        Logger name. Defaults to "periodmetrics".
    level:
        Level as int or name; unknown names fall back to INFO.
    stream:
        Target stream. Defaults to sys.stdout.
    fmt, datefmt:
        Formatter settings. Defaults to message only.
    propagate:
        Propagate to ancestor loggers. Off by default to avoid duplicate
        output when the root logger is configured elsewhere.
    """
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        level = resolved if isinstance(resolved, int) else logging.INFO

    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.propagate = propagate

    stream = sys.stdout if stream is None else stream
    handler = next(
        (
            h
            for h in logger.handlers
            if isinstance(h, logging.StreamHandler) and getattr(h, "stream", None) is stream
        ),
        None,
    )
    if handler is None:
        handler = logging.StreamHandler(stream)
        logger.addHandler(handler)

    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt=fmt, datefmt=datefmt))
    return logger


def format_change(change) -> str:
    """
    Render one UpdatedMetricValue as "metric@period_key: old -> new".
    """
    return f"{change.metric}@{period_key(change.period)}: {change.old_value} -> {change.value}"


def log_changes(logger, changes: Sequence, limit: int = MAX_LOGGED_CHANGES) -> None:
    """
    Log a changed-values list at DEBUG level, one line per change, at most
    `limit` lines followed by a count of the omitted ones.
    """
    if logger is None:
        return
    for change in changes[:limit]:
        logger.debug(f"  {format_change(change)}")
    if len(changes) > limit:
        logger.debug(f"  ... {len(changes) - limit} more changes")
