"""Date range resolution and period-over-period windows."""

import calendar
from datetime import date, timedelta
from enum import Enum

import polars as pl

from .models import DateRange, PeriodPair


class DateRangeMode(str, Enum):
    """Date range presets offered by the dashboard header."""

    CUSTOM = "custom"
    LAST_7 = "last-7"
    LAST_30 = "last-30"
    THIS_WEEK = "this-week"
    LAST_WEEK = "last-week"
    THIS_MONTH = "this-month"
    LAST_MONTH = "last-month"
    ALL = "all"


def shift_months(day: date, months: int) -> date:
    """Move a date by whole calendar months, clamping to the month's length.

    shift_months(date(2024, 3, 31), -1) == date(2024, 2, 29)
    """
    month_index = day.year * 12 + (day.month - 1) + months
    year, month = divmod(month_index, 12)
    month += 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))


def start_of_week(day: date) -> date:
    """Sunday on or before ``day``."""
    # date.weekday(): Monday = 0 .. Sunday = 6
    return day - timedelta(days=(day.weekday() + 1) % 7)


def resolve_range(
    mode: DateRangeMode | str,
    reference: date,
    custom_start: date | None = None,
    custom_end: date | None = None,
) -> DateRange | None:
    """Current window for a mode, relative to the reference day.

    Returns None when the mode places no date restriction: ``all``, or
    ``custom`` without both boundaries.

    Raises:
        InvalidDateRangeError: custom start after custom end
    """
    mode = DateRangeMode(mode)

    if mode is DateRangeMode.ALL:
        return None
    if mode is DateRangeMode.CUSTOM:
        if custom_start is None or custom_end is None:
            return None
        return DateRange(custom_start, custom_end)

    if mode is DateRangeMode.LAST_7:
        return DateRange(reference - timedelta(days=7), reference)
    if mode is DateRangeMode.LAST_30:
        return DateRange(reference - timedelta(days=30), reference)
    if mode is DateRangeMode.THIS_WEEK:
        return DateRange(start_of_week(reference), reference)
    if mode is DateRangeMode.LAST_WEEK:
        start = start_of_week(reference) - timedelta(days=7)
        return DateRange(start, start + timedelta(days=6))
    if mode is DateRangeMode.THIS_MONTH:
        return DateRange(reference.replace(day=1), reference)

    # LAST_MONTH
    first_of_month = reference.replace(day=1)
    end = first_of_month - timedelta(days=1)
    return DateRange(end.replace(day=1), end)


def get_previous_period(start: date, end: date) -> DateRange:
    """Same window one calendar month earlier.

    Both ends move back one month independently, so a 5-day window maps to a
    5-day window and Mar 31 maps to the last day of February.
    """
    return DateRange(shift_months(start, -1), shift_months(end, -1))


def build_period_pair(
    mode: DateRangeMode | str,
    reference: date,
    custom_start: date | None = None,
    custom_end: date | None = None,
) -> PeriodPair:
    """Current window plus its comparison window.

    ``previous`` is None for ``all`` and for a custom range missing either
    boundary; callers must then hide period deltas.
    """
    mode = DateRangeMode(mode)
    current = resolve_range(mode, reference, custom_start, custom_end)
    previous = (
        get_previous_period(current.start, current.end) if current is not None else None
    )
    return PeriodPair(mode=mode.value, current=current, previous=previous)


def filter_by_range(
    df: pl.DataFrame, date_range: DateRange | None, date_col: str = "date_start"
) -> pl.DataFrame:
    """Rows whose day falls inside the range, both ends inclusive.

    ``None`` keeps every row. Rows without a date never match a range.
    """
    if date_range is None:
        return df
    return df.filter(pl.col(date_col).is_between(date_range.start, date_range.end))
