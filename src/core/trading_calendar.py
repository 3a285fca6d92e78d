from __future__ import annotations

import datetime as dt
from collections.abc import Iterable
from typing import Any

from src.utils.time import to_date

_ONE_DAY = dt.timedelta(days=1)


def holiday_set(values: Iterable[Any]) -> frozenset[dt.date]:
    """Normalize dates/datetimes/ISO strings to a set of calendar dates; unparseable entries are dropped."""
    out = set()
    for v in values or ():
        d = to_date(v)
        if d is not None:
            out.add(d)
    return frozenset(out)


def is_trading_day(day: dt.date, holidays: frozenset[dt.date] | set[dt.date] = frozenset()) -> bool:
    return day.weekday() < 5 and day not in holidays


def trading_days_between(start: Any, end: Any, holidays: Iterable[Any] = ()) -> int:
    """
    Count weekdays in [start, end] (both inclusive) that are not holidays.

    A same-day buy/sell on a trading day counts as 1. If start > end, or either
    bound is missing, the count is 0.
    """
    s = to_date(start)
    e = to_date(end)
    if s is None or e is None:
        return 0
    hs = holiday_set(holidays)
    count = 0
    cur = s
    while cur <= e:
        if is_trading_day(cur, hs):
            count += 1
        cur += _ONE_DAY
    return count
