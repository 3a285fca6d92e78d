from __future__ import annotations

import datetime as dt
from collections import defaultdict
from collections.abc import Iterable
from typing import Optional

from src.core.types import RiskGroupCostBasis, RiskGroupView, SecurityView, TradeView
from src.utils.time import add_months


def _month_bounds(year: int, month: int) -> tuple[dt.date, dt.date]:
    start = dt.date(year, month, 1)
    return start, add_months(start, 1)


def risk_group_cost_basis(
    trades: Iterable[TradeView],
    securities: Iterable[SecurityView],
    risk_groups: Iterable[RiskGroupView],
    *,
    year: int,
    month: int,
    account_id: Optional[str] = None,
) -> list[RiskGroupCostBasis]:
    """
    Cost basis per risk group for trades held during the month.

    A trade counts if it is still open or was sold within [first of month,
    first of next month). Securities without a known risk group are skipped.
    Groups are returned in the order they are given.
    """
    start, end = _month_bounds(year, month)
    group_of = {s.id: s.risk_group_id for s in securities if s.risk_group_id}
    groups = list(risk_groups)
    known = {g.id for g in groups}

    cost: dict[str, float] = defaultdict(float)
    count: dict[str, int] = defaultdict(int)
    for t in trades:
        if account_id and t.account_id != account_id:
            continue
        if t.sell_date is not None and not (start <= t.sell_date < end):
            continue
        gid = group_of.get(t.security_id)
        if gid is None or gid not in known:
            continue
        cost[gid] += t.buy * t.quantity
        count[gid] += 1

    return [
        RiskGroupCostBasis(
            risk_group_id=g.id,
            risk_group_name=g.name,
            total_cost_basis=cost[g.id],
            trade_count=count[g.id],
        )
        for g in groups
        if count.get(g.id)
    ]


def capital_gains_total(trades: Iterable[TradeView]) -> float:
    return sum((t.sell - t.buy) * t.quantity for t in trades if t.sell_date is not None)
