"""Accounting period arithmetic.

Monthly periods recur from the day-of-month of the anchor (the account's
creation time). When that day does not exist in a target month the date
rolls over into the following month, so an anchor on the 31st shifted into
April lands on May 1st. Trial periods are a single 7-day window.

All functions are pure. Times are normalised to UTC midnight and returned as
timezone-aware UTC datetimes.
"""

from datetime import date, datetime, time, timedelta, timezone

from vatcounsel.core.config import PeriodKind
from vatcounsel.domains.usage.types import PeriodInfo

TRIAL_PERIOD_DAYS = 7


def _utc_date(value: datetime) -> date:
    # Naive datetimes are UTC (database columns store naive UTC)
    if value.tzinfo is None:
        return value.date()
    return value.astimezone(timezone.utc).date()


def _midnight(day: date) -> datetime:
    return datetime.combine(day, time.min, tzinfo=timezone.utc)


def add_months(anchor: date, months: int) -> date:
    """Shift ``anchor`` by whole months, rolling overflowing days into the next month.

    >>> add_months(date(2024, 1, 31), 1)
    datetime.date(2024, 3, 2)
    """
    total = anchor.month - 1 + months
    first_of_month = date(anchor.year + total // 12, total % 12 + 1, 1)
    return first_of_month + timedelta(days=anchor.day - 1)


def period_key_for(period_start: datetime) -> str:
    """Canonical YYYY-MM-DD key of a period start."""
    return period_start.strftime("%Y-%m-%d")


def get_period_info(anchor: datetime, now: datetime) -> PeriodInfo:
    """Monthly period enclosing ``now`` for a cycle anchored at ``anchor``.

    Args:
        anchor: Billing cycle anchor, typically the user's creation time
        now: Reference instant

    Returns:
        PeriodInfo with ``period_start <= now < period_end`` at day granularity
    """
    anchor_day = _utc_date(anchor)
    today = _utc_date(now)

    months_passed = (today.year - anchor_day.year) * 12 + (today.month - anchor_day.month)
    if today.day < anchor_day.day:
        months_passed -= 1

    start = add_months(anchor_day, months_passed)
    # Overflow can push the start past today (anchor Jan 31, today Mar 1)
    while start > today:
        months_passed -= 1
        start = add_months(anchor_day, months_passed)
    end = add_months(anchor_day, months_passed + 1)

    period_start = _midnight(start)
    return PeriodInfo(
        period_key=period_key_for(period_start),
        period_start=period_start,
        period_end=_midnight(end),
    )


def get_trial_period_info(anchor: datetime) -> PeriodInfo:
    """Fixed ``[anchor, anchor + 7 days)`` trial window. Never rolls."""
    period_start = _midnight(_utc_date(anchor))
    return PeriodInfo(
        period_key=period_key_for(period_start),
        period_start=period_start,
        period_end=period_start + timedelta(days=TRIAL_PERIOD_DAYS),
    )


def resolve_period(anchor: datetime, now: datetime, period_kind: PeriodKind) -> PeriodInfo:
    """Dispatch to the calculator for ``period_kind``."""
    if period_kind == PeriodKind.TRIAL:
        return get_trial_period_info(anchor)
    return get_period_info(anchor, now)


def is_period_open(period: PeriodInfo, now: datetime) -> bool:
    """Whether ``now`` falls inside the period at day granularity."""
    today = _midnight(_utc_date(now))
    return period.period_start <= today < period.period_end
