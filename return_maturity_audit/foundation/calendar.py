"""Calendar-day helpers shared by every return-lag analysis.

All analyses work on whole calendar days in a single reference frame.
Timestamps are converted to UTC before their date is taken so that a
purchase at 23:30 local time and one at 00:30 UTC never land in
different buckets depending on where the code happens to run.

Quick Start
-----------
>>> from datetime import date, datetime, timezone
>>> from return_maturity_audit.foundation.calendar import to_calendar_day, days_between
>>> to_calendar_day("2024-03-01")
datetime.date(2024, 3, 1)
>>> to_calendar_day(datetime(2024, 3, 1, 23, 30, tzinfo=timezone.utc))
datetime.date(2024, 3, 1)
>>> days_between(date(2024, 1, 1), date(2024, 2, 5))
35
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone


def to_calendar_day(value: date | datetime | str | None) -> date | None:
    """Normalise a date-like value to a calendar ``date``.

    Parameters
    ----------
    value:
        A ``date``, a ``datetime`` or an ISO 8601 string. Timezone-aware
        datetimes are converted to UTC first; naive datetimes are taken as
        already being in the reference frame.

    Returns
    -------
    date | None
        The calendar day, or None when ``value`` is None or an empty string.

    Raises
    ------
    TypeError
        If ``value`` is not date-like.
    ValueError
        If a string cannot be parsed as an ISO date or timestamp.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if len(text) == 10:
            return date.fromisoformat(text)
        return to_calendar_day(datetime.fromisoformat(text.replace("Z", "+00:00")))
    raise TypeError(
        "Expected a date, datetime or ISO string",
        {"value": value, "type": type(value).__name__},
    )


def days_between(start: date, end: date) -> int:
    """Whole calendar days from ``start`` to ``end`` (negative if end is earlier)."""
    return (end - start).days


def shift_days(day: date, days: int) -> date:
    return day + timedelta(days=days)


def iter_days(start: date, end: date):
    """Yield each calendar day in ``[start, end)``."""
    current = start
    while current < end:
        yield current
        current += timedelta(days=1)
