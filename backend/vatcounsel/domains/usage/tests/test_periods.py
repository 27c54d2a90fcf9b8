"""Unit tests for accounting period arithmetic."""

from datetime import date, datetime, timedelta, timezone

import pytest

from vatcounsel.core.config import PeriodKind
from vatcounsel.domains.usage.periods import (
    TRIAL_PERIOD_DAYS,
    add_months,
    get_period_info,
    get_trial_period_info,
    is_period_open,
    period_key_for,
    resolve_period,
)


def _utc(*args: int) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# add_months
# ---------------------------------------------------------------------------


class TestAddMonths:
    def test_plain_shift(self):
        assert add_months(date(2024, 1, 15), 1) == date(2024, 2, 15)

    def test_crosses_year(self):
        assert add_months(date(2023, 11, 15), 3) == date(2024, 2, 15)

    def test_negative_shift(self):
        assert add_months(date(2024, 1, 15), -1) == date(2023, 12, 15)

    def test_overflowing_day_rolls_into_next_month(self):
        assert add_months(date(2024, 1, 31), 1) == date(2024, 3, 2)
        assert add_months(date(2023, 1, 31), 1) == date(2023, 3, 3)
        assert add_months(date(2024, 3, 31), 1) == date(2024, 5, 1)

    def test_zero_is_identity(self):
        assert add_months(date(2024, 2, 29), 0) == date(2024, 2, 29)


# ---------------------------------------------------------------------------
# get_period_info
# ---------------------------------------------------------------------------


class TestGetPeriodInfo:
    def test_first_period(self):
        info = get_period_info(_utc(2024, 1, 1, 9, 30), _utc(2024, 1, 15))
        assert info.period_key == "2024-01-01"
        assert info.period_start == _utc(2024, 1, 1)
        assert info.period_end == _utc(2024, 2, 1)

    def test_period_starts_on_anchor_day_at_midnight(self):
        info = get_period_info(_utc(2024, 1, 10, 23, 59), _utc(2024, 2, 10, 0, 1))
        assert info.period_start == _utc(2024, 2, 10)
        assert info.period_end == _utc(2024, 3, 10)

    def test_day_before_anchor_day_is_previous_period(self):
        info = get_period_info(_utc(2024, 1, 10), _utc(2024, 2, 9, 23, 59))
        assert info.period_key == "2024-01-10"

    def test_now_equal_to_anchor(self):
        anchor = _utc(2024, 5, 20, 8, 0)
        info = get_period_info(anchor, anchor)
        assert info.period_start == _utc(2024, 5, 20)
        assert info.period_end == _utc(2024, 6, 20)

    @pytest.mark.parametrize(
        "now, start, end",
        [
            (_utc(2024, 2, 28), _utc(2024, 1, 31), _utc(2024, 3, 2)),
            (_utc(2024, 3, 1), _utc(2024, 1, 31), _utc(2024, 3, 2)),
            (_utc(2024, 3, 2), _utc(2024, 3, 2), _utc(2024, 3, 31)),
            (_utc(2024, 4, 15), _utc(2024, 3, 31), _utc(2024, 5, 1)),
        ],
    )
    def test_end_of_month_anchor(self, now, start, end):
        info = get_period_info(_utc(2024, 1, 31), now)
        assert info.period_start == start
        assert info.period_end == end
        assert info.period_key == period_key_for(start)

    def test_naive_datetimes_are_utc(self):
        naive = get_period_info(datetime(2024, 1, 1, 9, 30), datetime(2024, 1, 15))
        aware = get_period_info(_utc(2024, 1, 1, 9, 30), _utc(2024, 1, 15))
        assert naive == aware

    def test_non_utc_anchor_is_converted(self):
        plus_two = timezone(timedelta(hours=2))
        info = get_period_info(datetime(2024, 1, 1, 1, 0, tzinfo=plus_two), _utc(2024, 1, 5))
        assert info.period_key == "2023-12-31"

    def test_deterministic(self):
        anchor, now = _utc(2023, 8, 31, 17, 5), _utc(2024, 2, 29, 3, 0)
        assert get_period_info(anchor, now) == get_period_info(anchor, now)

    @pytest.mark.parametrize(
        "anchor",
        [_utc(2024, 1, 31), _utc(2024, 2, 29), _utc(2023, 3, 15, 22, 0), _utc(2024, 12, 30)],
    )
    def test_now_always_inside_its_period(self, anchor):
        for offset in range(0, 800, 3):
            now = anchor + timedelta(days=offset, hours=5)
            info = get_period_info(anchor, now)
            today = now.replace(hour=0, minute=0, second=0, microsecond=0)
            assert info.period_start <= today < info.period_end, (anchor, now, info)


# ---------------------------------------------------------------------------
# Trial periods
# ---------------------------------------------------------------------------


class TestTrialPeriod:
    def test_fixed_window_from_anchor(self):
        info = get_trial_period_info(_utc(2024, 1, 10, 15, 0))
        assert info.period_key == "2024-01-10"
        assert info.period_start == _utc(2024, 1, 10)
        assert info.period_end == _utc(2024, 1, 10) + timedelta(days=TRIAL_PERIOD_DAYS)

    def test_open_only_inside_window(self):
        info = get_trial_period_info(_utc(2024, 1, 10, 15, 0))
        assert is_period_open(info, _utc(2024, 1, 10, 0, 0))
        assert is_period_open(info, _utc(2024, 1, 16, 23, 59))
        assert not is_period_open(info, _utc(2024, 1, 17))
        assert not is_period_open(info, _utc(2024, 1, 9, 23, 59))

    def test_resolve_trial_never_rolls(self):
        anchor = _utc(2024, 1, 10)
        later = resolve_period(anchor, _utc(2024, 6, 1), PeriodKind.TRIAL)
        assert later == get_trial_period_info(anchor)

    def test_resolve_monthly(self):
        anchor, now = _utc(2024, 1, 10), _utc(2024, 6, 1)
        assert resolve_period(anchor, now, PeriodKind.MONTHLY) == get_period_info(anchor, now)


def test_period_key_format():
    assert period_key_for(_utc(2024, 3, 5)) == "2024-03-05"
