"""
Metrics tables.

This subpackage contains the table engine and its configuration records:
- MetricsTable: values per (metric, period), derived metrics, aggregates
- SubscribableMetricsTable: MetricsTable with per-cell change callbacks

Public API:
- MetricsTable, SubscribableMetricsTable
- TableConfiguration, MetricConfiguration, AggregateConfiguration, make_configuration
- MetricValue, UpdatedMetricValue
"""

from .configuration import (
    AggregateConfiguration,
    MetricConfiguration,
    MetricValue,
    TableConfiguration,
    UpdatedMetricValue,
    make_configuration,
)
from .metrics_table import MetricsTable
from .subscribable import SubscribableMetricsTable

__all__ = [
    "AggregateConfiguration",
    "MetricConfiguration",
    "MetricValue",
    "MetricsTable",
    "SubscribableMetricsTable",
    "TableConfiguration",
    "UpdatedMetricValue",
    "make_configuration",
]
