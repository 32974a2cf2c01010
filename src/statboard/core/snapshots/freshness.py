"""
Freshness tracking: fold per-resource Last-Modified stamps into one signal.

Freshness describes how recent the source data is, judged from the store's
Last-Modified metadata, not from when the client last fetched it.

Example:
    >>> from datetime import datetime, timezone
    >>> t1 = datetime(2024, 6, 1, 10, tzinfo=timezone.utc)
    >>> t2 = datetime(2024, 6, 1, 12, tzinfo=timezone.utc)
    >>> state = fold([t1, None, t2], now=datetime(2024, 6, 1, 13, tzinfo=timezone.utc))
    >>> state.most_recent_timestamp == t2, state.is_fresh
    (True, True)
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timedelta, timezone
from email.utils import parsedate_to_datetime

from statboard.core.snapshots.models import FreshnessState

DEFAULT_STALE_THRESHOLD = timedelta(hours=24)


def _as_aware(moment: datetime) -> datetime:
    # Naive stamps are taken to be UTC, which is what HTTP dates are
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


def fold(
    timestamps: Iterable[datetime | None],
    stale_threshold: timedelta = DEFAULT_STALE_THRESHOLD,
    now: datetime | None = None,
) -> FreshnessState:
    """
    Reduce optional timestamps to the most recent one and a fresh flag.

    Absent entries mean "metadata unavailable" and are skipped. The result
    does not depend on input order. Never raises.

    Args:
        timestamps: Last-Modified stamps, None where a probe failed
        stale_threshold: Age at which data stops being fresh
        now: Reference instant (defaults to the current UTC time)

    Returns:
        FreshnessState; (None, False) when every stamp is absent
    """
    present = [_as_aware(t) for t in timestamps if t is not None]
    if not present:
        return FreshnessState(most_recent_timestamp=None, is_fresh=False)

    reference = _as_aware(now) if now is not None else datetime.now(timezone.utc)
    most_recent = max(present)
    return FreshnessState(
        most_recent_timestamp=most_recent,
        is_fresh=(reference - most_recent) < stale_threshold,
    )


def parse_last_modified(value: str | None) -> datetime | None:
    """
    Parse an HTTP Last-Modified header value.

    Returns:
        Aware datetime, or None when the header is absent or unparsable
    """
    if not value:
        return None
    try:
        parsed = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return None
    if parsed is None:
        return None
    return _as_aware(parsed)


def format_time_ago(moment: datetime, now: datetime | None = None) -> str:
    """
    Short relative age label.

    Example:
        >>> from datetime import datetime, timezone
        >>> now = datetime(2024, 6, 1, 13, tzinfo=timezone.utc)
        >>> format_time_ago(datetime(2024, 6, 1, 12, tzinfo=timezone.utc), now)
        '1h ago'
    """
    reference = _as_aware(now) if now is not None else datetime.now(timezone.utc)
    seconds = int((reference - _as_aware(moment)).total_seconds())

    if seconds < 60:
        return "Just now"
    if seconds < 3600:
        return f"{seconds // 60}m ago"
    if seconds < 86400:
        return f"{seconds // 3600}h ago"
    return f"{seconds // 86400}d ago"


__all__ = [
    "DEFAULT_STALE_THRESHOLD",
    "fold",
    "format_time_ago",
    "parse_last_modified",
]
