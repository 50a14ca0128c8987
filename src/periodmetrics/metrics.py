"""
Small numeric helpers for compute and aggregate rules.

These helpers never raise on empty input: sums and averages of nothing are
zero. Guarding divisions by those results is up to the calling rule.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Iterable, Optional, Sequence

ZERO = Decimal(0)


def value_or_zero(value: Optional[Decimal]) -> Decimal:
    return ZERO if value is None else value


def decimal_sum(values: Iterable[Decimal]) -> Decimal:
    return sum(values, ZERO)


def average(values: Iterable[Decimal]) -> Decimal:
    values = list(values)
    if not values:
        return ZERO
    return decimal_sum(values) / len(values)


def weighted_rate(table, rate_metric: str, weight_metric: str, periods: Sequence) -> Optional[Decimal]:
    """
    Aggregate a rate over several periods, weighted by another metric.

        sum(weight * rate) / average(weight)

    Absent values count as zero. Returns None (absent) when the average
    weight is zero.

    Typical use as a custom aggregate rule:

        aggregate=lambda table, periods, period, current: weighted_rate(
            table, "churnRate", "beginningMRR", periods
        )
    """
    weights = [value_or_zero(table.get_value(weight_metric, p)) for p in periods]
    rates = [value_or_zero(table.get_value(rate_metric, p)) for p in periods]

    avg_weight = average(weights)
    if avg_weight == ZERO:
        return None
    return decimal_sum(w * r for w, r in zip(weights, rates)) / avg_weight
