"""Resolve symbolic or explicit query windows into concrete bounds."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from datetime import date, datetime, time, timedelta, timezone, tzinfo

from moodscope.analysis.models import DateRange, TimeRange

logger = logging.getLogger(__name__)

TIME_RANGE_DAYS: dict[TimeRange, int] = {
    TimeRange.WEEK: 7,
    TimeRange.MONTH: 30,
    TimeRange.QUARTER: 90,
    TimeRange.YEAR: 365,
}

DEFAULT_TIME_RANGE = TimeRange.MONTH


def coerce_time_range(value: TimeRange | str | None) -> TimeRange:
    """Parse a time range tag.  Unknown or missing tags fall back to ``month``."""
    if isinstance(value, TimeRange):
        return value
    if value is None:
        return DEFAULT_TIME_RANGE
    try:
        return TimeRange(value.strip().lower())
    except ValueError:
        logger.debug("Unknown time range %r, using %s", value, DEFAULT_TIME_RANGE.value)
        return DEFAULT_TIME_RANGE


def _as_datetime(value: date | datetime, *, end_of_day: bool = False) -> datetime:
    """Promote a date to a UTC datetime; make naive datetimes UTC."""
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    clock = time.max if end_of_day else time.min
    return datetime.combine(value, clock, tzinfo=timezone.utc)


def resolve_date_range(
    time_range: TimeRange | str | None,
    start: date | datetime | None = None,
    end: date | datetime | None = None,
    *,
    now: datetime,
) -> DateRange:
    """Concrete bounds for a query.

    An explicit *start* always wins over the symbolic tag; *end* defaults
    to *now*.  Without a *start*, the window is the tag's length counted
    back from *end*.  A bare ``date`` for *end* covers that whole day.
    """
    resolved_end = _as_datetime(end, end_of_day=True) if end is not None else _as_datetime(now)
    if start is not None:
        resolved_start = _as_datetime(start)
    else:
        days = TIME_RANGE_DAYS[coerce_time_range(time_range)]
        resolved_start = resolved_end - timedelta(days=days)
    if resolved_start > resolved_end:
        resolved_start, resolved_end = resolved_end, resolved_start
    return DateRange(start=resolved_start, end=resolved_end)


def iter_day_keys(date_range: DateRange, tz: tzinfo = timezone.utc) -> Iterator[str]:
    """Every calendar day touched by *date_range* in *tz*, as ``YYYY-MM-DD``."""
    day = date_range.start.astimezone(tz).date()
    last = date_range.end.astimezone(tz).date()
    while day <= last:
        yield day.isoformat()
        day += timedelta(days=1)
