from __future__ import annotations

import datetime as dt
import functools
import locale
from collections.abc import Sequence
from typing import Any, Optional

from src.core.errors import InvalidSortSpecError
from src.core.types import DisplayRow, SortCriterion
from src.core.yield_math import projected_ex_date
from src.utils.time import EPOCH, epoch_seconds, to_date

_ZERO_DEFAULT_FIELDS = {"yield_percent", "avg_purchase_yield_percent", "most_recent_sell_price"}


def sortable_ex_date(row: DisplayRow, today: dt.date) -> dt.date:
    return projected_ex_date(row.ex_date, row.distributions_per_year, today)


def field_value(row: DisplayRow, field: str, today: dt.date) -> Any:
    if field in _ZERO_DEFAULT_FIELDS:
        v = getattr(row, field, None)
        return 0 if v is None else v
    if field == "ex_date":
        return sortable_ex_date(row, today)
    if field == "most_recent_sell_date":
        return to_date(row.most_recent_sell_date) or EPOCH
    return getattr(row, field, None)


def _is_number(v: Any) -> bool:
    return isinstance(v, (int, float)) and not isinstance(v, bool)


def _compare_text(a: str, b: str) -> int:
    c = locale.strcoll(a.casefold(), b.casefold())
    if c:
        return -1 if c < 0 else 1
    # Same letters: lowercase before uppercase.
    a2, b2 = a.swapcase(), b.swapcase()
    return (a2 > b2) - (a2 < b2)


def compare_for_sort(a: Any, b: Any) -> int:
    """
    Three-way compare for sort values.

    Dates compare chronologically, numbers numerically and strings by locale
    collation. Mixed or unsupported types compare equal.
    """
    if isinstance(a, dt.date) and isinstance(b, dt.date):
        if type(a) is not type(b) or (isinstance(a, dt.datetime) and (a.tzinfo is None) != (b.tzinfo is None)):
            a, b = epoch_seconds(a), epoch_seconds(b)
        return (a > b) - (a < b)
    if _is_number(a) and _is_number(b):
        diff = a - b
        return (diff > 0) - (diff < 0)
    if isinstance(a, str) and isinstance(b, str):
        return _compare_text(a, b)
    return 0


def sort_universe(rows: Sequence[DisplayRow], criteria: Sequence[SortCriterion], *, today: dt.date) -> list[DisplayRow]:
    """Multi-key stable sort; rows tied on every criterion keep their input order."""
    if not criteria:
        return list(rows)

    def _cmp(a: DisplayRow, b: DisplayRow) -> int:
        for c in criteria:
            result = compare_for_sort(field_value(a, c.field, today), field_value(b, c.field, today))
            if result != 0:
                return c.order * result
        return 0

    return sorted(rows, key=functools.cmp_to_key(_cmp))


def toggle_sort(criteria: Sequence[SortCriterion], field: str) -> list[SortCriterion]:
    """Cycle a column: absent -> ascending (appended) -> descending -> removed."""
    out = [c.model_copy() for c in criteria]
    for i, c in enumerate(out):
        if c.field != field:
            continue
        if c.order == 1:
            out[i] = SortCriterion(field=field, order=-1)
        else:
            del out[i]
        return out
    out.append(SortCriterion(field=field, order=1))
    return out


def sort_position(criteria: Sequence[SortCriterion], field: str) -> Optional[int]:
    for i, c in enumerate(criteria):
        if c.field == field:
            return i + 1
    return None


def parse_sort_spec(raw: str) -> SortCriterion:
    """Parse "field", "field:1", "field:-1", "field:asc" or "field:desc"."""
    s = (raw or "").strip()
    if not s:
        raise InvalidSortSpecError("Empty sort field")
    field, _, order_raw = s.partition(":")
    field = field.strip()
    if not field:
        raise InvalidSortSpecError(f"Missing sort field in {raw!r}")
    order_raw = order_raw.strip().lower()
    if order_raw in {"", "1", "asc"}:
        order = 1
    elif order_raw in {"-1", "desc"}:
        order = -1
    else:
        raise InvalidSortSpecError(f"Invalid sort order in {raw!r}; expected 1, -1, asc or desc")
    return SortCriterion(field=field, order=order)
