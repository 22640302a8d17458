"""Tests for date range resolution and previous-period windows."""

from collections.abc import Callable
from datetime import date

import polars as pl
import pytest

from adrollup.analytics import (
    DateRange,
    DateRangeMode,
    build_period_pair,
    filter_by_range,
    get_previous_period,
    resolve_range,
    shift_months,
)
from adrollup.exceptions import InvalidDateRangeError

# Wednesday
REFERENCE = date(2024, 3, 20)


class TestShiftMonths:
    """Tests for shift_months()."""

    def test_plain_shift(self) -> None:
        assert shift_months(date(2024, 3, 15), -1) == date(2024, 2, 15)

    def test_clamps_to_leap_february(self) -> None:
        assert shift_months(date(2024, 3, 31), -1) == date(2024, 2, 29)

    def test_clamps_to_february(self) -> None:
        assert shift_months(date(2023, 3, 31), -1) == date(2023, 2, 28)

    def test_crosses_year(self) -> None:
        assert shift_months(date(2024, 1, 31), -1) == date(2023, 12, 31)

    def test_forward(self) -> None:
        assert shift_months(date(2024, 1, 31), 1) == date(2024, 2, 29)


class TestPreviousPeriod:
    """Tests for get_previous_period()."""

    def test_five_day_window(self) -> None:
        previous = get_previous_period(date(2024, 3, 10), date(2024, 3, 14))

        assert previous == DateRange(date(2024, 2, 10), date(2024, 2, 14))
        assert previous.days == 5

    def test_last_day_of_march(self) -> None:
        previous = get_previous_period(date(2024, 3, 31), date(2024, 3, 31))
        assert previous == DateRange(date(2024, 2, 29), date(2024, 2, 29))

    def test_last_day_of_march_non_leap(self) -> None:
        previous = get_previous_period(date(2023, 3, 31), date(2023, 3, 31))
        assert previous == DateRange(date(2023, 2, 28), date(2023, 2, 28))


class TestResolveRange:
    """Tests for resolve_range()."""

    @pytest.mark.parametrize(
        "mode, start, end",
        [
            ("last-7", date(2024, 3, 13), date(2024, 3, 20)),
            ("last-30", date(2024, 2, 19), date(2024, 3, 20)),
            ("this-week", date(2024, 3, 17), date(2024, 3, 20)),
            ("last-week", date(2024, 3, 10), date(2024, 3, 16)),
            ("this-month", date(2024, 3, 1), date(2024, 3, 20)),
            ("last-month", date(2024, 2, 1), date(2024, 2, 29)),
        ],
    )
    def test_modes(self, mode: str, start: date, end: date) -> None:
        assert resolve_range(mode, REFERENCE) == DateRange(start, end)

    def test_week_starts_on_sunday(self) -> None:
        sunday = date(2024, 3, 17)
        assert resolve_range("this-week", sunday) == DateRange(sunday, sunday)

    def test_last_month_in_january(self) -> None:
        result = resolve_range(DateRangeMode.LAST_MONTH, date(2024, 1, 10))
        assert result == DateRange(date(2023, 12, 1), date(2023, 12, 31))

    def test_all_has_no_range(self) -> None:
        assert resolve_range("all", REFERENCE) is None

    def test_custom(self) -> None:
        result = resolve_range("custom", REFERENCE, date(2024, 1, 5), date(2024, 1, 9))
        assert result == DateRange(date(2024, 1, 5), date(2024, 1, 9))

    def test_custom_missing_boundary(self) -> None:
        assert resolve_range("custom", REFERENCE, date(2024, 1, 5), None) is None

    def test_custom_inverted(self) -> None:
        with pytest.raises(InvalidDateRangeError):
            resolve_range("custom", REFERENCE, date(2024, 1, 9), date(2024, 1, 5))

    def test_unknown_mode(self) -> None:
        with pytest.raises(ValueError):
            resolve_range("yesterday", REFERENCE)


class TestBuildPeriodPair:
    """Tests for build_period_pair()."""

    def test_last_month(self) -> None:
        pair = build_period_pair("last-month", REFERENCE)

        assert pair.current == DateRange(date(2024, 2, 1), date(2024, 2, 29))
        assert pair.previous == DateRange(date(2024, 1, 1), date(2024, 1, 29))
        assert pair.has_comparison

    def test_this_month(self) -> None:
        pair = build_period_pair("this-month", REFERENCE)
        assert pair.previous == DateRange(date(2024, 2, 1), date(2024, 2, 20))

    def test_all_has_no_comparison(self) -> None:
        pair = build_period_pair("all", REFERENCE)

        assert pair.current is None
        assert pair.previous is None
        assert not pair.has_comparison

    def test_custom_without_boundaries(self) -> None:
        pair = build_period_pair("custom", REFERENCE)
        assert pair.previous is None


class TestFilterByRange:
    """Tests for filter_by_range()."""

    @pytest.fixture
    def dated_df(self, make_frame: Callable[..., pl.DataFrame]) -> pl.DataFrame:
        return make_frame(
            [
                {"ad_id": "before", "date_start": "2024-02-29"},
                {"ad_id": "first", "date_start": "2024-03-01"},
                {"ad_id": "last", "date_start": "2024-03-20T23:59:59"},
                {"ad_id": "after", "date_start": "2024-03-21"},
                {"ad_id": "undated"},
            ]
        )

    def test_boundaries_inclusive(self, dated_df: pl.DataFrame) -> None:
        result = filter_by_range(dated_df, DateRange(date(2024, 3, 1), date(2024, 3, 20)))
        assert result["ad_id"].to_list() == ["first", "last"]

    def test_none_keeps_everything(self, dated_df: pl.DataFrame) -> None:
        assert len(filter_by_range(dated_df, None)) == 5
