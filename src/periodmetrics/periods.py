"""
Calendar periods: months, quarters and years.

A period is one of three immutable variants:

    Month(month, year)      month in 1..12
    Quarter(quarter, year)  quarter in 1..4
    Year(year)

Every period has a canonical string key, used as the storage key of the
metrics table:

    Year     -> "2023"
    Month    -> "2023-01"
    Quarter  -> "2023-33" for Q1 .. "2023-36" for Q4

Quarters borrow the ISO 8601 EDTF level 2 "sub-year grouping" codes, so a
single key space holds all three shapes without ambiguity.
"""

from __future__ import annotations

import functools
import re
from dataclasses import dataclass
from typing import Callable, Iterable, List, TypeVar, Union

from periodmetrics import config


T = TypeVar("T")


@dataclass(frozen=True)
class Month:
    month: int
    year: int


@dataclass(frozen=True)
class Quarter:
    quarter: int
    year: int


@dataclass(frozen=True)
class Year:
    year: int


Period = Union[Month, Quarter, Year]


_KEY_RE = re.compile(r"^(\d{4})(?:-(0[1-9]|1[0-2]|3[3-6]))?$")


def is_month(period: Period) -> bool:
    return isinstance(period, Month)


def is_quarter(period: Period) -> bool:
    return isinstance(period, Quarter)


def is_year(period: Period) -> bool:
    return not is_month(period) and not is_quarter(period)


def period_selector(
    period: Period,
    *,
    year: Callable[[Year], T],
    quarter: Callable[[Quarter], T],
    month: Callable[[Month], T],
) -> T:
    """
    Call the action matching the period variant and return its result.
    """
    if is_year(period):
        return year(period)
    if is_quarter(period):
        return quarter(period)
    return month(period)


def period_key(period: Period) -> str:
    """
    Return the canonical key of a period ("2023", "2023-01", "2023-33").
    """
    if is_month(period):
        return f"{period.year:04d}-{period.month:02d}"
    if is_quarter(period):
        return f"{period.year:04d}-{period.quarter + config.QUARTER_KEY_OFFSET}"
    return f"{period.year:04d}"


def period_from_key(key: str) -> Period:
    """
    Inverse of period_key.

    The key is assumed to be well formed; use is_period_key to check
    untrusted input first.
    """
    if len(key) == config.YEAR_KEY_LENGTH:
        return Year(int(key))

    year, sub = (int(x) for x in key.split("-"))
    if sub <= config.MONTHS_PER_YEAR:
        return Month(month=sub, year=year)
    return Quarter(quarter=sub - config.QUARTER_KEY_OFFSET, year=year)


def is_period_key(key) -> bool:
    """
    Tell whether `key` is a well-formed period key.
    """
    return isinstance(key, str) and _KEY_RE.match(key) is not None


def compare_periods(a: Period, b: Period) -> int:
    """
    Compare two periods, returning a negative, zero or positive number.

    Periods of different years compare by year. Within a year:
    - months compare by month number
    - a quarter is positioned at month quarter*3, so Q1 ties with March
    - quarters compare by quarter number
    - the year itself comes after all its months and quarters
    """
    if a.year != b.year:
        return a.year - b.year

    if is_month(a):
        if is_month(b):
            return a.month - b.month
        if is_quarter(b):
            return a.month - b.quarter * config.MONTHS_PER_QUARTER
        return -1
    if is_quarter(a):
        if is_month(b):
            return a.quarter * config.MONTHS_PER_QUARTER - b.month
        if is_quarter(b):
            return a.quarter - b.quarter
        return -1
    return 0 if is_year(b) else 1


period_sort_key = functools.cmp_to_key(compare_periods)


def sort_periods(periods: Iterable[Period]) -> List[Period]:
    """
    Sort periods with aggregates interleaved after their months.
    The sort is stable, so ties (e.g. March and Q1) keep their input order.
    """
    return sorted(periods, key=period_sort_key)


def months_for_quarter(period: Quarter) -> List[Month]:
    first = config.MONTHS_PER_QUARTER * period.quarter - (config.MONTHS_PER_QUARTER - 1)
    return [Month(month=first + i, year=period.year) for i in range(config.MONTHS_PER_QUARTER)]


def months_for_year(period: Year) -> List[Month]:
    return [Month(month=i + 1, year=period.year) for i in range(config.MONTHS_PER_YEAR)]


def months_of(period: Period) -> List[Month]:
    """
    Return the months making up a period, in calendar order.
    """
    return period_selector(
        period,
        year=months_for_year,
        quarter=months_for_quarter,
        month=lambda m: [m],
    )

