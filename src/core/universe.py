from __future__ import annotations

import datetime as dt
import logging
import os
from collections.abc import Iterable, Sequence

from src.core.positions import aggregate_position, has_open_position_in_any_account, trades_by_security
from src.core.types import DisplayRow, RiskGroupView, SecurityView, TradeView, UniverseQuery, UniverseSnapshot
from src.core.universe_filters import (
    apply_account_scope,
    apply_expired_filter,
    apply_expired_with_positions_filter,
    apply_risk_group_filter,
    apply_symbol_filter,
    apply_yield_filter,
)
from src.core.universe_sort import sort_universe
from src.core.yield_math import market_yield_percent

log = logging.getLogger(__name__)


def max_rows_warning_threshold() -> int:
    try:
        return int(os.environ.get("UNIVERSE_MAX_ROWS_WARN", "1000"))
    except ValueError:
        return 1000


def build_display_rows(
    securities: Iterable[SecurityView],
    risk_groups: Iterable[RiskGroupView],
    trades: Iterable[TradeView] = (),
) -> list[DisplayRow]:
    """
    One row per security, in input order.

    Position and last-sell columns hold the all-accounts aggregate; the
    purchase yield is left at 0 until the account scope is applied.
    """
    names = {g.id: g.name for g in risk_groups}
    by_security = trades_by_security(trades)
    rows: list[DisplayRow] = []
    for sec in securities:
        totals = aggregate_position(by_security.get(sec.id, ()), security_id=sec.id)
        rows.append(
            DisplayRow(
                security_id=sec.id,
                symbol=sec.symbol,
                risk_group=names.get(sec.risk_group_id, "") if sec.risk_group_id else "",
                distribution=sec.distribution,
                distributions_per_year=sec.distributions_per_year,
                last_price=sec.last_price,
                ex_date=sec.ex_date,
                yield_percent=market_yield_percent(sec.distribution, sec.distributions_per_year, sec.last_price),
                avg_purchase_yield_percent=0.0,
                expired=sec.expired,
                is_closed_end_fund=sec.is_closed_end_fund,
                position=totals.position,
                most_recent_sell_date=totals.most_recent_sell_date,
                most_recent_sell_price=totals.most_recent_sell_price,
            )
        )
    return rows


def filter_universe(rows: Sequence[DisplayRow], snapshot: UniverseSnapshot, query: UniverseQuery) -> list[DisplayRow]:
    out = apply_symbol_filter(rows, query.symbol_filter)
    out = apply_yield_filter(out, query.min_yield)
    out = apply_risk_group_filter(out, query.risk_group_filter)
    out = apply_account_scope(out, query.selected_account, trades=snapshot.trades, securities=snapshot.securities)

    def _held_anywhere(security_id: str) -> bool:
        return has_open_position_in_any_account(snapshot.accounts, security_id=security_id)

    out = apply_expired_with_positions_filter(out, query.expired_filter, query.selected_account, _held_anywhere)
    out = apply_expired_filter(out, query.expired_filter)
    return out


def filter_and_sort_universe(snapshot: UniverseSnapshot, query: UniverseQuery, *, today: dt.date) -> list[DisplayRow]:
    rows = build_display_rows(snapshot.securities, snapshot.risk_groups, snapshot.trades)
    if len(rows) > max_rows_warning_threshold():
        log.warning("Universe has %d rows; filtering is tuned for about %d", len(rows), max_rows_warning_threshold())
    filtered = filter_universe(rows, snapshot, query)
    result = sort_universe(filtered, query.sort_criteria, today=today)
    log.debug(
        "Universe pipeline: %d rows in, %d out (account=%s, sort=%s)",
        len(rows),
        len(result),
        query.selected_account,
        [(c.field, c.order) for c in query.sort_criteria],
    )
    return result
