"""
pandas views of a metrics table, and conversion of frames into updates.

Wide frame (one row per metric, one column per period key):

    period        2023-01  2023-02  2023-03  2023-33  ...  2023
    metric
    beginningMRR     10.0      NaN      NaN     10.0  ...  10.0

Long frame:

    ['metric', 'period', 'value', 'is_aggregate']

Columns follow table.get_periods() order, so aggregates are interleaved
after their months. Values are Decimal in the table; wide frames convert
them to float64 unless as_float=False.
"""

from __future__ import annotations

from decimal import Decimal
from typing import List, Optional

import numpy as np
import pandas as pd

from periodmetrics import config
from periodmetrics.periods import Month, Period, Quarter, Year, is_period_key, period_from_key, period_key
from periodmetrics.table import MetricValue


def to_frame(table, *, include_aggregates: bool = True, as_float: bool = True) -> pd.DataFrame:
    """
    Pivot a table into a wide DataFrame indexed by metric.

    Parameters
    ----------
    table:
        MetricsTable to read.
    include_aggregates:
        Keep quarter / year aggregate columns. Defaults to True.
    as_float:
        float64 cells with NaN for absent values. With False, cells hold the
        Decimal values (object dtype) and None for absent ones.
    """
    periods = table.get_periods()
    if not include_aggregates:
        periods = [p for p in periods if not table.is_aggregate(p)]
    metrics = table.get_metrics()

    if as_float:
        data = np.full((len(metrics), len(periods)), np.nan, dtype="float64")
    else:
        data = np.full((len(metrics), len(periods)), None, dtype=object)

    for i, metric in enumerate(metrics):
        for j, period in enumerate(periods):
            value = table.get_value(metric, period)
            if value is not None:
                data[i, j] = float(value) if as_float else value

    return pd.DataFrame(
        data,
        index=pd.Index(metrics, name="metric", dtype=object),
        columns=pd.Index([period_key(p) for p in periods], name="period", dtype=object),
    )


def to_long_frame(table) -> pd.DataFrame:
    """
    One row per stored value: ['metric','period','value','is_aggregate'].

    Rows are ordered by metric declaration, then period order. `value`
    holds Decimal objects.
    """
    periods = table.get_periods()
    rows = []
    for metric in table.get_metrics():
        for period in periods:
            value = table.get_value(metric, period)
            if value is None:
                continue
            rows.append((metric, period_key(period), value, table.is_aggregate(period)))

    df = pd.DataFrame(rows, columns=config.LONG_FRAME_COLUMNS)
    df["is_aggregate"] = df["is_aggregate"].astype("bool")
    return df


def values_from_frame(
    df: pd.DataFrame,
    *,
    metric_col: str = "metric",
    period_col: str = "period",
    value_col: str = "value",
) -> List[MetricValue]:
    """
    Convert a long frame into MetricValue triples, in row order.

    Period cells may be Period objects, period keys ("2023-01") or integer
    years. Missing values (None / NaN / NA) become absent values, which
    clear the cell when applied.

    Raises
    ------
    ValueError
        If a required column is missing or a period cell is malformed.
    """
    req = {metric_col, period_col, value_col}
    missing = sorted(req - set(df.columns))
    if missing:
        raise ValueError(f"df missing required columns: {missing}")

    return [
        MetricValue(metric=str(metric), period=_to_period(period), value=_to_decimal(value))
        for metric, period, value in zip(df[metric_col], df[period_col], df[value_col])
    ]


def _to_period(cell) -> Period:
    if isinstance(cell, (Month, Quarter, Year)):
        return cell
    if isinstance(cell, (int, np.integer)) and not isinstance(cell, bool):
        return Year(int(cell))
    if is_period_key(cell):
        return period_from_key(cell)
    raise ValueError(f"Malformed period: {cell!r}")


def _to_decimal(cell) -> Optional[Decimal]:
    if cell is None:
        return None
    if isinstance(cell, Decimal):
        return None if cell.is_nan() else cell
    if pd.isna(cell):
        return None
    if isinstance(cell, (int, np.integer)):
        return Decimal(int(cell))
    if isinstance(cell, (float, np.floating)):
        # Shortest repr, so 0.1 stays Decimal("0.1")
        return Decimal(repr(float(cell)))
    return Decimal(str(cell))
