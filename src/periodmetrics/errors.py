"""
Exceptions raised by periodmetrics.
"""

from __future__ import annotations


class UnknownMetricError(ValueError):
    """
    Raised when an operation references a metric that is not declared
    in the table configuration.
    """

    def __init__(self, metric):
        super().__init__(f"Unknown metric: {metric}")
        self.metric = metric


class ReentrantUpdateError(RuntimeError):
    """
    Raised when subscription callbacks nest update() calls deeper than
    the configured limit.
    """
