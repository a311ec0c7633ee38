"""
Date Range Resolver — maps a symbolic reporting period to concrete bounds.

Bounds are naive local datetimes anchored to "now". Every bounded period
ends at 23:59:59.999 of its last day, so a period's bounds are inclusive.
Unknown tags resolve to the unbounded range so reporting stays available.
"""

import logging
from datetime import datetime, timedelta
from typing import Optional, Union

from moving_insights.models.period import DateRange, ResolvedRange

logger = logging.getLogger(__name__)

_END_OF_DAY = {"hour": 23, "minute": 59, "second": 59, "microsecond": 999000}

_PERIOD_LABELS = {
    DateRange.TODAY: "today",
    DateRange.THIS_WEEK: "this week",
    DateRange.THIS_MONTH: "this month",
    DateRange.THIS_QUARTER: "this quarter",
    DateRange.THIS_YEAR: "this year",
    DateRange.SINCE_INCEPTION: "all time",
}


def _as_date_range(date_range: Union[DateRange, str, None]) -> Optional[DateRange]:
    if isinstance(date_range, DateRange):
        return date_range
    try:
        return DateRange(date_range)
    except ValueError:
        return None


def _first_of_month(year: int, month: int) -> datetime:
    """First day of a month, where month may run one past December."""
    year += (month - 1) // 12
    month = (month - 1) % 12 + 1
    return datetime(year, month, 1)


def _last_day_end(year: int, month: int) -> datetime:
    """23:59:59.999 on the last day of the month ("day 0" of the next month)."""
    last_day = _first_of_month(year, month + 1) - timedelta(days=1)
    return last_day.replace(**_END_OF_DAY)


def resolve_date_range(
    date_range: Union[DateRange, str, None],
    now: Optional[datetime] = None,
) -> ResolvedRange:
    """Resolve a period tag against `now` (local time when omitted)."""
    tag = _as_date_range(date_range)
    if tag is None:
        logger.warning("Unrecognized date range %r, reporting since inception", date_range)
        return ResolvedRange()

    now = now or datetime.now()
    today = datetime(now.year, now.month, now.day)

    if tag == DateRange.TODAY:
        return ResolvedRange(
            start=today,
            end=today + timedelta(days=1) - timedelta(milliseconds=1),
        )

    if tag == DateRange.THIS_WEEK:
        # Day index 0 is Sunday; Python's weekday() counts from Monday.
        days_since_sunday = (today.weekday() + 1) % 7
        week_start = today - timedelta(days=days_since_sunday)
        week_end = (week_start + timedelta(days=6)).replace(**_END_OF_DAY)
        return ResolvedRange(start=week_start, end=week_end)

    if tag == DateRange.THIS_MONTH:
        return ResolvedRange(
            start=datetime(now.year, now.month, 1),
            end=_last_day_end(now.year, now.month),
        )

    if tag == DateRange.THIS_QUARTER:
        quarter = (now.month - 1) // 3
        first_month = quarter * 3 + 1
        return ResolvedRange(
            start=datetime(now.year, first_month, 1),
            end=_last_day_end(now.year, first_month + 2),
        )

    if tag == DateRange.THIS_YEAR:
        return ResolvedRange(
            start=datetime(now.year, 1, 1),
            end=datetime(now.year, 12, 31).replace(**_END_OF_DAY),
        )

    return ResolvedRange()


def period_label(date_range: Union[DateRange, str, None]) -> str:
    """Human-readable name of a period, e.g. "this quarter"."""
    tag = _as_date_range(date_range)
    if tag is None:
        return _PERIOD_LABELS[DateRange.SINCE_INCEPTION]
    return _PERIOD_LABELS[tag]
