"""
Integrity checks ("emergency brake") for metrics tables.

These checks are intentionally strict and meant to catch configuration or
data-loading mistakes early, e.g. after bulk-loading values from a frame or
a JSON payload. They raise AssertionError on failure.

Invariants checked:
- every stored key is a canonical period key
- the table is at a fixed point: re-running recomputation changes nothing
"""

from __future__ import annotations

from periodmetrics.periods import is_period_key, period_from_key, period_key


def check_period_keys(logger, table) -> None:
    """
    Every stored value must sit under a canonical, round-tripping period key.
    """
    n = 0
    for value in table.iter_values():
        key = period_key(value.period)
        assert is_period_key(key), f"Malformed period key for {value.metric}: {key}"
        assert period_from_key(key) == value.period, f"Period key does not round-trip: {key}"
        n += 1

    if logger is not None:
        logger.info(f"Period keys checked: values={n}")


def check_fixed_point(logger, table) -> None:
    """
    Recomputing a clone must reproduce every value of the table.

    Fails when compute / aggregate rules do not converge in a single pass,
    typically because a metric is declared before a metric it reads.
    """
    clone = table.deep_clone()
    clone.update([])
    periods = list(dict.fromkeys(table.get_periods() + clone.get_periods()))

    drift = [
        f"{metric}@{period_key(period)}"
        for metric in table.get_metrics()
        for period in periods
        if clone.get_value(metric, period) != table.get_value(metric, period)
    ]

    if logger is not None:
        logger.info(f"Fixed point checked: drifting_cells={len(drift)}")

    assert not drift, "Table is not at a fixed point; drifting cells: " + ", ".join(drift[:10])


def check_metrics_table(logger, table) -> None:
    """
    Run all metrics table checks.
    """
    check_period_keys(logger, table)
    check_fixed_point(logger, table)

    if logger is not None:
        logger.info(
            f"Metrics table checks passed: metrics={len(table.get_metrics())}, "
            f"periods={len(table.get_periods())}"
        )
