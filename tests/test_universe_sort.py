from __future__ import annotations

import datetime as dt

import pytest

from src.core.errors import InvalidSortSpecError
from src.core.types import DisplayRow, SortCriterion
from src.core.universe_sort import (
    compare_for_sort,
    field_value,
    parse_sort_spec,
    sort_position,
    sort_universe,
    toggle_sort,
)
from src.utils.time import EPOCH

TODAY = dt.date(2025, 3, 15)


def _row(symbol: str, **kw) -> DisplayRow:
    base = dict(
        security_id=symbol,
        symbol=symbol,
        risk_group="Equities",
        distribution=0.1,
        distributions_per_year=4,
        last_price=10.0,
        ex_date=None,
        yield_percent=4.0,
    )
    base.update(kw)
    return DisplayRow(**base)


def _symbols(rows):
    return [r.symbol for r in rows]


def test_multi_key_sort_falls_through_on_ties():
    rows = [_row("VXUS", avg_purchase_yield_percent=1.026), _row("VTI", avg_purchase_yield_percent=1.026)]
    criteria = [SortCriterion(field="avg_purchase_yield_percent", order=-1), SortCriterion(field="symbol", order=1)]
    assert _symbols(sort_universe(rows, criteria, today=TODAY)) == ["VTI", "VXUS"]


def test_descending_numeric_sort():
    rows = [_row("A", yield_percent=2.0), _row("B", yield_percent=7.5), _row("C", yield_percent=4.0)]
    out = sort_universe(rows, [SortCriterion(field="yield_percent", order=-1)], today=TODAY)
    assert _symbols(out) == ["B", "C", "A"]


def test_sort_is_stable_for_full_ties():
    rows = [_row(s, yield_percent=3.0, risk_group="Income") for s in ("D", "A", "C", "B")]
    criteria = [SortCriterion(field="yield_percent", order=1), SortCriterion(field="risk_group", order=-1)]
    assert _symbols(sort_universe(rows, criteria, today=TODAY)) == ["D", "A", "C", "B"]


def test_no_criteria_keeps_order():
    rows = [_row("B"), _row("A")]
    assert sort_universe(rows, [], today=TODAY) == rows


def test_ex_date_sorts_by_projected_date():
    rows = [
        # Stale monthly date projects to 2025-04-01, after QTR's 2025-03-20.
        _row("MONTHLY", ex_date=dt.date(2025, 3, 1), distributions_per_year=12),
        _row("QTR", ex_date=dt.date(2025, 3, 20), distributions_per_year=4),
        _row("NONE", ex_date=None),
    ]
    out = sort_universe(rows, [SortCriterion(field="ex_date", order=1)], today=TODAY)
    assert _symbols(out) == ["NONE", "QTR", "MONTHLY"]


def test_field_value_defaults():
    r = _row("X", most_recent_sell_date=None, most_recent_sell_price=None)
    assert field_value(r, "most_recent_sell_date", TODAY) == EPOCH
    assert field_value(r, "most_recent_sell_price", TODAY) == 0
    assert field_value(r, "ex_date", TODAY) == EPOCH
    assert field_value(r, "symbol", TODAY) == "X"
    assert field_value(r, "no_such_field", TODAY) is None


def test_missing_sell_date_sorts_first():
    rows = [_row("SOLD", most_recent_sell_date=dt.date(2025, 1, 2)), _row("NEVER")]
    out = sort_universe(rows, [SortCriterion(field="most_recent_sell_date", order=1)], today=TODAY)
    assert _symbols(out) == ["NEVER", "SOLD"]


def test_compare_for_sort_mixed_types_are_equal():
    assert compare_for_sort(1.0, "1") == 0
    assert compare_for_sort(None, 3) == 0
    assert compare_for_sort(dt.date(2025, 1, 1), 5) == 0
    assert compare_for_sort(True, False) == 0


def test_compare_for_sort_basic_types():
    assert compare_for_sort(1, 2) < 0
    assert compare_for_sort(2.5, 2.5) == 0
    assert compare_for_sort(dt.date(2025, 1, 2), dt.date(2025, 1, 1)) > 0
    assert compare_for_sort("apple", "Banana") < 0
    assert compare_for_sort("b", "B") < 0


def test_toggle_sort_cycles_and_appends():
    criteria: list[SortCriterion] = []
    criteria = toggle_sort(criteria, "yield_percent")
    assert [(c.field, c.order) for c in criteria] == [("yield_percent", 1)]
    criteria = toggle_sort(criteria, "symbol")
    assert [(c.field, c.order) for c in criteria] == [("yield_percent", 1), ("symbol", 1)]
    criteria = toggle_sort(criteria, "yield_percent")
    assert [(c.field, c.order) for c in criteria] == [("yield_percent", -1), ("symbol", 1)]
    criteria = toggle_sort(criteria, "yield_percent")
    assert [(c.field, c.order) for c in criteria] == [("symbol", 1)]


def test_toggle_sort_does_not_mutate_input():
    original = [SortCriterion(field="symbol", order=1)]
    toggle_sort(original, "symbol")
    assert original[0].order == 1


def test_sort_position_is_one_based():
    criteria = [SortCriterion(field="ex_date", order=1), SortCriterion(field="symbol", order=-1)]
    assert sort_position(criteria, "symbol") == 2
    assert sort_position(criteria, "yield_percent") is None


@pytest.mark.parametrize(
    "raw,expected",
    [("symbol", ("symbol", 1)), ("ex_date:-1", ("ex_date", -1)), ("yield_percent:desc", ("yield_percent", -1))],
)
def test_parse_sort_spec(raw, expected):
    c = parse_sort_spec(raw)
    assert (c.field, c.order) == expected


@pytest.mark.parametrize("raw", ["", ":1", "symbol:2", "symbol:up"])
def test_parse_sort_spec_rejects_bad_input(raw):
    with pytest.raises(InvalidSortSpecError):
        parse_sort_spec(raw)


def test_compare_for_sort_keeps_time_of_day():
    morning = dt.datetime(2025, 1, 2, 9, 0)
    evening = dt.datetime(2025, 1, 2, 17, 0)
    assert compare_for_sort(morning, evening) < 0
    assert compare_for_sort(evening, morning) > 0
    # A bare date is its midnight.
    assert compare_for_sort(dt.date(2025, 1, 2), morning) < 0
    assert compare_for_sort(dt.date(2025, 1, 2), dt.datetime(2025, 1, 2)) == 0
    aware = dt.datetime(2025, 1, 2, 10, 0, tzinfo=dt.timezone.utc)
    assert compare_for_sort(morning, aware) < 0
