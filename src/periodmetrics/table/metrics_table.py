"""
Mutable table of metrics over calendar periods.

The table stores, per declared metric, one decimal value per period key:

    data: {metric_name: {period_key: Decimal}}

A missing key means the value is absent ("not yet known"), which is
different from zero.

Every call to update():
1) writes the given values in order
2) recomputes all compute rules over every base period, in declaration order
3) recomputes quarter / year aggregates for every year holding a base period
4) returns the cells whose value actually changed, writes first

Recomputation always rescans the whole table. There is no dependency graph:
compute rules may read sibling metrics already updated in the same pass.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Dict, Iterable, Iterator, List, Optional, Sequence

from periodmetrics import config
from periodmetrics.errors import UnknownMetricError
from periodmetrics.logging_utils import log_changes
from periodmetrics.metrics import average, decimal_sum, value_or_zero
from periodmetrics.periods import (
    Period,
    Quarter,
    Year,
    is_quarter,
    is_year,
    months_for_quarter,
    months_for_year,
    period_from_key,
    period_key,
    sort_periods,
)
from .configuration import MetricConfiguration, MetricValue, TableConfiguration, UpdatedMetricValue


class MetricsTable:
    """
    A mutable metrics table computing derived metrics and aggregates.

    Parameters
    ----------
    configuration:
        Declared metrics and aggregate toggles. Static for the table's lifetime.
    initial_values:
        Optional MetricValue triples, applied through update() so that
        derived values and aggregates are computed too.
    logger:
        Optional logger; update summaries are logged at DEBUG level.
    """

    def __init__(
        self,
        configuration: TableConfiguration,
        initial_values: Optional[Iterable[MetricValue]] = None,
        *,
        logger=None,
    ):
        self.configuration = configuration
        self._logger = logger
        self._data: Dict[str, Dict[str, Decimal]] = {m.name: {} for m in configuration.metrics}

        if initial_values:
            self.update(initial_values)

    # ------------------------------------------------------------------
    # Read accessors
    # ------------------------------------------------------------------

    def _row(self, metric: str) -> Dict[str, Decimal]:
        row = self._data.get(metric)
        if row is None:
            raise UnknownMetricError(metric)
        return row

    def get_value(self, metric: str, period: Period) -> Optional[Decimal]:
        """
        Return the value of a metric for a period, or None if absent.
        """
        return self._row(metric).get(period_key(period))

    def get_metrics(self) -> List[str]:
        return list(self._data.keys())

    def get_periods(self) -> List[Period]:
        """
        Return every period holding a value for any metric, sorted with
        aggregates interleaved after their months.
        """
        keys = dict.fromkeys(key for row in self._data.values() for key in row)
        return sort_periods(period_from_key(key) for key in keys)

    def is_aggregate(self, period: Period) -> bool:
        aggregates = self.configuration.aggregates
        if is_quarter(period):
            return aggregates.quarter
        if is_year(period):
            return aggregates.year
        return False

    def iter_values(self) -> Iterator[MetricValue]:
        """
        Yield every stored value, metrics in declaration order.
        """
        for metric, row in self._data.items():
            for key, value in row.items():
                yield MetricValue(metric=metric, period=period_from_key(key), value=value)

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def update(self, values: Iterable[MetricValue]) -> List[UpdatedMetricValue]:
        """
        Write the given values, recompute, and return every changed cell.

        Unknown metrics are rejected before anything is written.
        """
        values = list(values)
        for value in values:
            self._row(value.metric)

        updated_values: List[UpdatedMetricValue] = []
        for value in values:
            self._set_value(value.metric, value.period, value.value, updated_values)
        n_written = len(updated_values)

        self._recompute(updated_values)

        if self._logger is not None:
            self._logger.debug(
                f"Table update: inputs={len(values)}, written={n_written}, "
                f"recomputed={len(updated_values) - n_written}"
            )
            log_changes(self._logger, updated_values)
        return updated_values

    def deep_clone(self) -> "MetricsTable":
        """
        Return an independent table with the same configuration and values.
        Subscriptions, if any, are not carried over.
        """
        return type(self)(self.configuration, list(self.iter_values()), **self._clone_kwargs())

    def _clone_kwargs(self) -> dict:
        return {"logger": self._logger}

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _set_value(
        self,
        metric: str,
        period: Period,
        new_value: Optional[Decimal],
        updated_values: List[UpdatedMetricValue],
    ) -> None:
        row = self._row(metric)
        key = period_key(period)
        old_value = row.get(key)

        if old_value is None and new_value is None:
            return
        if old_value is not None and new_value is not None and new_value == old_value:
            return

        if new_value is None:
            del row[key]
        else:
            row[key] = new_value
        updated_values.append(
            UpdatedMetricValue(metric=metric, period=period, value=new_value, old_value=old_value)
        )

    def _recompute(self, updated_values: List[UpdatedMetricValue]) -> None:
        # Ordered set of years, ascending as periods are sorted
        years: Dict[int, None] = {}

        for period in self.get_periods():
            if self.is_aggregate(period):
                continue
            years[period.year] = None
            for metric in self.configuration.metrics:
                if metric.compute is None:
                    continue
                old_value = self.get_value(metric.name, period)
                new_value = metric.compute(self, period, old_value)
                self._set_value(metric.name, period, new_value, updated_values)

        aggregates = self.configuration.aggregates
        if aggregates.quarter:
            for year in years:
                for quarter in range(1, config.QUARTERS_PER_YEAR + 1):
                    period = Quarter(quarter=quarter, year=year)
                    self._compute_aggregate(period, months_for_quarter(period), updated_values)
        if aggregates.year:
            for year in years:
                period = Year(year)
                self._compute_aggregate(period, months_for_year(period), updated_values)

    def _compute_aggregate(
        self,
        period: Period,
        included_periods: Sequence[Period],
        updated_values: List[UpdatedMetricValue],
    ) -> None:
        for metric in self.configuration.metrics:
            if metric.aggregate is None:
                continue
            old_value = self.get_value(metric.name, period)
            new_value = self._aggregate(metric, included_periods, period, old_value)
            self._set_value(metric.name, period, new_value, updated_values)

    def _aggregate(
        self,
        metric: MetricConfiguration,
        included_periods: Sequence[Period],
        period: Period,
        old_value: Optional[Decimal],
    ) -> Optional[Decimal]:
        rule = metric.aggregate
        if rule == "first":
            return self.get_value(metric.name, included_periods[0]) if included_periods else None
        if rule == "last":
            return self.get_value(metric.name, included_periods[-1]) if included_periods else None
        if rule == "average":
            return average(value_or_zero(self.get_value(metric.name, p)) for p in included_periods)
        if rule == "sum":
            return decimal_sum(value_or_zero(self.get_value(metric.name, p)) for p in included_periods)
        return rule(self, list(included_periods), period, old_value)

    def __repr__(self):
        n_values = sum(len(row) for row in self._data.values())
        return f"{type(self).__name__}(metrics={len(self._data)}, values={n_values})"
