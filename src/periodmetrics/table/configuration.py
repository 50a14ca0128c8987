"""
Static configuration and value records of a metrics table.

A table is configured once, at construction:

    TableConfiguration(
        metrics=[
            MetricConfiguration("beginningMRR", aggregate="sum"),
            MetricConfiguration("endingMRR", compute=copy_beginning_mrr),
        ],
        aggregates=AggregateConfiguration(quarter=True, year=True),
    )

There is no dependency tracking between metrics: compute rules run in
declaration order, so a metric must be declared after the metrics it reads
if it wants to see their values from the same pass.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Callable, Optional, Sequence, Tuple, Union

from periodmetrics import config
from periodmetrics.periods import Period


# compute(table, period, current_value) -> new value or None
ComputeRule = Callable[..., Optional[Decimal]]

# aggregate(table, included_periods, period, current_value) -> new value or None
AggregateRule = Union[str, Callable[..., Optional[Decimal]]]


@dataclass(frozen=True)
class MetricConfiguration:
    """
    Declaration of one metric.

    Parameters
    ----------
    name:
        Metric name, unique within the table.
    compute:
        Optional rule invoked for every base (non-aggregate) period on each
        update, with (table, period, current_value).
    aggregate:
        Optional rule for aggregate periods: one of "first", "last",
        "average", "sum", or a callable invoked with
        (table, included_periods, period, current_value).
    """

    name: str
    compute: Optional[ComputeRule] = None
    aggregate: Optional[AggregateRule] = None


@dataclass(frozen=True)
class AggregateConfiguration:
    """
    Which aggregate granularities are materialized.
    """

    quarter: bool = False
    year: bool = False


@dataclass(frozen=True)
class TableConfiguration:
    metrics: Tuple[MetricConfiguration, ...] = ()
    aggregates: AggregateConfiguration = field(default_factory=AggregateConfiguration)

    def __post_init__(self):
        # Accept any sequence; store an immutable tuple
        object.__setattr__(self, "metrics", tuple(self.metrics))

        seen = set()
        for metric in self.metrics:
            if metric.name in seen:
                raise ValueError(f"Duplicate metric name: {metric.name}")
            seen.add(metric.name)

            if isinstance(metric.aggregate, str) and metric.aggregate not in config.BUILTIN_AGGREGATES:
                raise ValueError(
                    f"Unknown aggregate {metric.aggregate!r} for metric {metric.name}; "
                    f"expected one of {list(config.BUILTIN_AGGREGATES)} or a callable"
                )

    @property
    def metric_names(self) -> Tuple[str, ...]:
        return tuple(m.name for m in self.metrics)


@dataclass(frozen=True)
class MetricValue:
    """
    A value for a (metric, period) cell. `value=None` means absent.
    """

    metric: str
    period: Period
    value: Optional[Decimal] = None


@dataclass(frozen=True)
class UpdatedMetricValue:
    """
    A cell that changed during an update, with its previous value.
    """

    metric: str
    period: Period
    value: Optional[Decimal]
    old_value: Optional[Decimal]


def make_configuration(
    metrics: Sequence[MetricConfiguration],
    *,
    quarter: bool = False,
    year: bool = False,
) -> TableConfiguration:
    """
    Shorthand for building a TableConfiguration.
    """
    return TableConfiguration(
        metrics=tuple(metrics),
        aggregates=AggregateConfiguration(quarter=quarter, year=year),
    )
