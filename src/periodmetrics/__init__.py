"""
periodmetrics

An in-memory table of named decimal metrics indexed by month, quarter and
year. Derived metrics are recomputed on every update, values roll up into
quarter / year aggregates, and observers are notified of exactly the cells
that changed.

Public API:
- get_logger
- Month, Quarter, Year, period_key, period_from_key, compare_periods
- MetricsTable, SubscribableMetricsTable and their configuration records
- UnknownMetricError
- check_metrics_table
"""

from __future__ import annotations

# Public logging utility
from .logging_utils import get_logger

from .errors import ReentrantUpdateError, UnknownMetricError

# Period algebra
from .periods import (
    Month,
    Period,
    Quarter,
    Year,
    compare_periods,
    is_month,
    is_quarter,
    is_year,
    months_of,
    period_from_key,
    period_key,
    sort_periods,
)

# Tables
from .table import (
    AggregateConfiguration,
    MetricConfiguration,
    MetricValue,
    MetricsTable,
    SubscribableMetricsTable,
    TableConfiguration,
    UpdatedMetricValue,
    make_configuration,
)

# Integrity checks
from .validation.checks import check_metrics_table

__all__ = [
    "get_logger",
    "ReentrantUpdateError",
    "UnknownMetricError",
    "Month",
    "Period",
    "Quarter",
    "Year",
    "compare_periods",
    "is_month",
    "is_quarter",
    "is_year",
    "months_of",
    "period_from_key",
    "period_key",
    "sort_periods",
    "AggregateConfiguration",
    "MetricConfiguration",
    "MetricValue",
    "MetricsTable",
    "SubscribableMetricsTable",
    "TableConfiguration",
    "UpdatedMetricValue",
    "make_configuration",
    "check_metrics_table",
]
