from __future__ import annotations

import datetime as dt
from typing import Any

UTC = dt.timezone.utc

EPOCH = dt.date(1970, 1, 1)


def today() -> dt.date:
    return dt.date.today()


def parse_datetime(value: Any) -> dt.datetime | None:
    if value is None:
        return None
    if isinstance(value, dt.datetime):
        return value
    if isinstance(value, dt.date):
        return dt.datetime(value.year, value.month, value.day)
    if isinstance(value, str):
        s = value.strip()
        if not s:
            return None
        # Support "Z" suffix.
        s = s.replace("Z", "+00:00")
        try:
            return dt.datetime.fromisoformat(s)
        except ValueError:
            return None
    return None


def to_date(value: Any) -> dt.date | None:
    """
    Coerce a date-ish value to a calendar date, dropping any time-of-day.

    Accepts `date`, `datetime` and ISO strings ("2025-03-14", "2025-03-14T00:00:00Z").
    Anything else (including blank strings) returns None.
    """
    if value is None:
        return None
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, dt.date):
        return value
    d = parse_datetime(value)
    if d is None:
        return None
    return d.date()


def epoch_seconds(value: dt.date) -> float:
    # Naive datetimes and bare dates are read as UTC; a date is its midnight.
    if not isinstance(value, dt.datetime):
        value = dt.datetime(value.year, value.month, value.day)
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.timestamp()


def add_months(value: dt.date, months: int) -> dt.date:
    # Clamp to the last day of the target month (Jan 31 + 1 month -> Feb 28/29).
    idx = value.month - 1 + months
    year = value.year + idx // 12
    month = idx % 12 + 1
    if month == 12:
        last_day = 31
    else:
        last_day = (dt.date(year, month + 1, 1) - dt.timedelta(days=1)).day
    return dt.date(year, month, min(value.day, last_day))


def format_date(value: Any, dash: str = "—") -> str:
    d = to_date(value)
    if d is None:
        return dash
    return d.isoformat()
