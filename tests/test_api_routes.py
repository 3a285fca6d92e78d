from __future__ import annotations

import datetime as dt

import pytest
from fastapi import HTTPException

from src.app.db import universe_snapshot
from src.app.routes.positions import account_closed_positions, account_open_positions
from src.app.routes.summary import risk_groups_summary
from src.app.routes.universe import universe_rows
from src.core.types import RiskGroupView, SecurityView, TradeView

GROUPS = [RiskGroupView(id="1", name="Equities"), RiskGroupView(id="2", name="Income")]
SECURITIES = [
    SecurityView(id="a", symbol="PDI", distribution=0.2, distributions_per_year=12, last_price=20.0, risk_group_id="2"),
    SecurityView(id="b", symbol="ECC", distribution=0.14, distributions_per_year=12, last_price=10.0, risk_group_id="2"),
    SecurityView(id="c", symbol="VTI", distribution=1.0, distributions_per_year=4, last_price=250.0, risk_group_id="1"),
]
TRADES = [
    TradeView(id="1", account_id="1", security_id="a", buy=19.0, quantity=10, buy_date=dt.date(2025, 1, 6)),
    TradeView(
        id="2",
        account_id="1",
        security_id="b",
        buy=10.0,
        quantity=20,
        buy_date=dt.date(2025, 1, 6),
        sell=11.0,
        sell_date=dt.date(2025, 1, 10),
    ),
]


@pytest.fixture()
def snap(snapshot_factory):
    return snapshot_factory(SECURITIES, TRADES, risk_groups=GROUPS, account_ids=["1", "2"])


def _universe(snap, **overrides):
    params = dict(symbol="", min_yield=None, risk_group=None, expired=None, account="all", sort=[], snapshot=snap)
    params.update(overrides)
    return universe_rows(**params)


def test_universe_filters_and_sorts(snap):
    out = _universe(snap, risk_group="Income", sort=["symbol:asc"])
    assert out["count"] == 2
    assert [r["symbol"] for r in out["rows"]] == ["ECC", "PDI"]
    assert out["query"]["sort_criteria"] == [{"field": "symbol", "order": 1}]


def test_universe_account_scope_fills_position(snap):
    out = _universe(snap, account="1", symbol="pdi")
    (row,) = out["rows"]
    assert row["position"] == pytest.approx(190.0)


def test_universe_bad_sort_is_400(snap):
    with pytest.raises(HTTPException) as exc:
        _universe(snap, sort=["symbol:sideways"])
    assert exc.value.status_code == 400


def test_open_and_closed_positions(snap):
    open_out = account_open_positions("1", snapshot=snap)
    assert [r["symbol"] for r in open_out["rows"]] == ["PDI"]

    closed_out = account_closed_positions("1", snapshot=snap)
    assert [r["symbol"] for r in closed_out["rows"]] == ["ECC"]
    assert closed_out["capital_gains"] == pytest.approx(20.0)


def test_unknown_account_is_404(snap):
    with pytest.raises(HTTPException) as exc:
        account_open_positions("99", snapshot=snap)
    assert exc.value.status_code == 404


def test_risk_groups_summary(snap):
    out = risk_groups_summary(year=2025, month=1, account=None, snapshot=snap)
    assert [(r["risk_group_name"], r["trade_count"]) for r in out["rows"]] == [("Income", 2)]
    assert out["rows"][0]["total_cost_basis"] == pytest.approx(190.0 + 200.0)


def test_malformed_holiday_file_is_http_error(session, tmp_path, monkeypatch):
    bad = tmp_path / "holidays.yaml"
    bad.write_text("holidays: [2025-05-26\n")
    monkeypatch.setenv("HOLIDAYS_FILE", str(bad))
    with pytest.raises(HTTPException) as exc:
        universe_snapshot(session)
    assert exc.value.status_code == 500
    assert "holidays" in exc.value.detail


def test_open_positions_read_the_shared_clock(snap, monkeypatch):
    import src.app.routes.positions as positions_routes

    monkeypatch.setattr(positions_routes, "current_date", lambda: dt.date(2025, 1, 10))
    out = account_open_positions("1", snapshot=snap)
    assert out["rows"][0]["days_held"] == 5
