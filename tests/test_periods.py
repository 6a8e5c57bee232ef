from datetime import date, datetime

import pytest

from budgetcore.domain import InvalidArgument, normalize_kind
from budgetcore.periods import (
    parse_range,
    period_bounds,
    period_days,
    period_key,
    period_label,
    previous_period_bounds,
    shift,
)

# Wednesday
REF = datetime(2024, 3, 6, 15, 30)


def test_daily_bounds_start_at_midnight():
    assert period_bounds(REF, "daily") == (datetime(2024, 3, 6), datetime(2024, 3, 7))


def test_weekly_bounds_start_on_monday():
    start, end = period_bounds(REF, "weekly")
    assert start == datetime(2024, 3, 4)
    assert start.weekday() == 0
    assert end == datetime(2024, 3, 11)


def test_weekly_bounds_on_a_sunday_go_back_six_days():
    start, _ = period_bounds(datetime(2024, 3, 10, 23, 59), "weekly")
    assert start == datetime(2024, 3, 4)


def test_monthly_and_yearly_bounds():
    assert period_bounds(REF, "monthly") == (datetime(2024, 3, 1), datetime(2024, 4, 1))
    assert period_bounds(datetime(2024, 12, 31), "monthly") == (datetime(2024, 12, 1), datetime(2025, 1, 1))
    assert period_bounds(REF, "yearly") == (datetime(2024, 1, 1), datetime(2025, 1, 1))


def test_bounds_accept_plain_dates():
    assert period_bounds(date(2024, 3, 6), "daily") == (datetime(2024, 3, 6), datetime(2024, 3, 7))


def test_previous_period_is_contiguous():
    for kind in ("daily", "weekly", "monthly", "yearly"):
        prev_start, prev_end = previous_period_bounds(REF, kind)
        start, _ = period_bounds(REF, kind)
        assert prev_end == start
        assert prev_start < prev_end


def test_previous_month_crosses_year_boundary():
    assert previous_period_bounds(datetime(2024, 1, 15), "monthly") == (
        datetime(2023, 12, 1),
        datetime(2024, 1, 1),
    )


def test_shift_clamps_month_end():
    assert shift(datetime(2024, 1, 31), "monthly") == datetime(2024, 2, 29)
    assert shift(datetime(2023, 1, 31), "monthly") == datetime(2023, 2, 28)
    assert shift(datetime(2024, 2, 29), "yearly") == datetime(2025, 2, 28)
    assert shift(datetime(2024, 3, 31), "monthly", -1) == datetime(2024, 2, 29)


def test_period_keys():
    assert period_key(datetime(2024, 3, 6), "daily") == "2024-03-06"
    assert period_key(datetime(2024, 3, 4), "weekly") == "2024-W10"
    assert period_key(datetime(2024, 3, 1), "monthly") == "2024-03"
    assert period_key(datetime(2024, 1, 1), "yearly") == "2024"


def test_period_labels():
    assert period_label(datetime(2024, 3, 4), "weekly") == "Week of March 4, 2024"
    assert period_label(datetime(2024, 3, 1), "monthly") == "March 2024"
    assert period_label(datetime(2024, 1, 1), "yearly") == "2024"


def test_period_days():
    assert period_days("monthly", datetime(2024, 2, 10)) == 29
    assert period_days("weekly", REF) == 7
    assert period_days("yearly", REF) == 366


def test_normalize_kind_aliases():
    assert normalize_kind("month") == "monthly"
    assert normalize_kind(" Week ") == "weekly"
    assert normalize_kind("today") == "daily"
    assert normalize_kind("yearly") == "yearly"


def test_unknown_kind_is_rejected():
    with pytest.raises(InvalidArgument):
        period_bounds(REF, "fortnight")
    with pytest.raises(InvalidArgument):
        normalize_kind(None)


def test_parse_range_rejects_end_before_start():
    assert parse_range("2024-03-01", "2024-03-15") == (datetime(2024, 3, 1), datetime(2024, 3, 15))
    with pytest.raises(InvalidArgument):
        parse_range("2024-03-15", "2024-03-01")
    with pytest.raises(InvalidArgument):
        parse_range("not a date", "2024-03-01")
