"""
Period policy: live vs. archived snapshots for a reporting month.

The current calendar month is served from the live rolling-window
snapshots; earlier months come from the monthly archive. Months after the
current one do not exist yet and are rejected.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timezone

from statboard.core.snapshots.exceptions import InvalidPeriodError
from statboard.core.snapshots.models import EARLIEST_YEAR, Period, PeriodClass

MONTH_NAMES: tuple[str, ...] = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)


def utc_now() -> datetime:
    """Default clock."""
    return datetime.now(timezone.utc)


def current_period(clock: Callable[[], datetime] = utc_now) -> Period:
    """Return the calendar month the clock currently reads."""
    return Period.from_datetime(clock())


def classify(requested: Period, now: Period) -> PeriodClass:
    """
    Decide whether ``requested`` is the current month or a past one.

    Day-of-month plays no part: any moment within the current month
    classifies as CURRENT.

    Args:
        requested: Period selected by the caller
        now: Current calendar month

    Returns:
        PeriodClass.CURRENT or PeriodClass.PAST

    Raises:
        InvalidPeriodError: If ``requested`` is after ``now``

    Example:
        >>> classify(Period(year=2024, month=3), Period(year=2024, month=6))
        <PeriodClass.PAST: 'past'>
    """
    if requested == now:
        return PeriodClass.CURRENT
    if requested < now:
        return PeriodClass.PAST
    raise InvalidPeriodError(requested, now)


def selectable_years(now: Period) -> list[int]:
    """Years a period selector may offer, newest first."""
    return list(range(now.year, EARLIEST_YEAR - 1, -1))


def selectable_periods(now: Period) -> list[Period]:
    """
    Every period in ``[2020-01, now]``, newest first.

    Example:
        >>> [p.label for p in selectable_periods(Period(year=2020, month=3))]
        ['2020-03', '2020-02', '2020-01']
    """
    periods: list[Period] = []
    for year in selectable_years(now):
        last_month = now.month if year == now.year else 12
        periods.extend(Period(year=year, month=m) for m in range(last_month, 0, -1))
    return periods


__all__ = [
    "MONTH_NAMES",
    "classify",
    "current_period",
    "selectable_periods",
    "selectable_years",
    "utc_now",
]
