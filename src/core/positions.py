from __future__ import annotations

import datetime as dt
from collections.abc import Iterable, Sequence
from typing import Optional

from src.core.errors import AccountNotFoundError
from src.core.trading_calendar import holiday_set, trading_days_between
from src.core.types import (
    ALL_ACCOUNTS,
    AccountView,
    ClosedPositionRow,
    GainClassification,
    OpenPositionRow,
    PositionTotals,
    SecurityView,
    TradeView,
)
from src.core.yield_math import average_price, projected_ex_date, purchase_yield_percent, target_gain_for_trade


def scoped_trades(trades: Iterable[TradeView], *, security_id: str, scope: str = ALL_ACCOUNTS) -> list[TradeView]:
    out = []
    for t in trades:
        if t.security_id != security_id:
            continue
        if scope != ALL_ACCOUNTS and t.account_id != scope:
            continue
        out.append(t)
    return out


def aggregate_position(trades: Iterable[TradeView], *, security_id: str, scope: str = ALL_ACCOUNTS) -> PositionTotals:
    """
    Fold one security's trades into cost basis and last-sell data.

    `scope` is an account id, or ALL_ACCOUNTS to merge every trade given. Cost and
    quantity come from open trades only; the most recent sell comes from closed ones.
    Trades for other securities (or unknown ones) are ignored.
    """
    total_cost = 0.0
    total_qty = 0.0
    last_sell: Optional[TradeView] = None
    for t in scoped_trades(trades, security_id=security_id, scope=scope):
        if t.is_open:
            total_cost += float(t.buy) * float(t.quantity)
            total_qty += float(t.quantity)
            continue
        if last_sell is None or t.sell_date > last_sell.sell_date:
            last_sell = t
    return PositionTotals(
        total_cost=total_cost,
        total_quantity=total_qty,
        position=total_cost,
        most_recent_sell_date=last_sell.sell_date if last_sell is not None else None,
        most_recent_sell_price=float(last_sell.sell) if last_sell is not None else None,
    )


def trades_by_security(trades: Iterable[TradeView]) -> dict[str, list[TradeView]]:
    out: dict[str, list[TradeView]] = {}
    for t in trades:
        out.setdefault(t.security_id, []).append(t)
    return out


def average_purchase_yield(security: Optional[SecurityView], trades: Iterable[TradeView], *, scope: str = ALL_ACCOUNTS) -> float:
    if security is None or (security.distribution or 0) <= 0:
        return 0.0
    totals = aggregate_position(trades, security_id=security.id, scope=scope)
    avg = average_price(totals.total_cost, totals.total_quantity)
    return purchase_yield_percent(security.distribution, security.distributions_per_year, avg)


def has_open_position_in_any_account(accounts: Iterable[AccountView], *, security_id: str) -> bool:
    """True when at least one account, checked on its own trades, holds a positive open position."""
    for acct in accounts:
        totals = aggregate_position(acct.trades, security_id=security_id, scope=acct.id)
        if totals.position > 0:
            return True
    return False


def find_account(accounts: Sequence[AccountView], account_id: str) -> AccountView:
    for acct in accounts:
        if acct.id == account_id:
            return acct
    raise AccountNotFoundError(account_id)


def _securities_by_id(securities: Iterable[SecurityView]) -> dict[str, SecurityView]:
    return {s.id: s for s in securities if s.symbol}


def open_positions(
    account: AccountView,
    securities: Iterable[SecurityView],
    *,
    today: dt.date,
    holidays: Iterable[dt.date] = frozenset(),
) -> list[OpenPositionRow]:
    secmap = _securities_by_id(securities)
    hs = holiday_set(holidays)
    rows: list[OpenPositionRow] = []
    for t in account.trades:
        if t.sell > 0 and t.sell_date is not None:
            continue
        sec = secmap.get(t.security_id)
        if sec is None:
            continue
        ex = projected_ex_date(sec.ex_date, sec.distributions_per_year, today, annual_fallback=True)
        days_to_ex = trading_days_between(t.buy_date, ex, hs)
        days_held = trading_days_between(t.buy_date, today, hs)
        tg = target_gain_for_trade(
            distribution=sec.distribution,
            quantity=t.quantity,
            buy_price=t.buy,
            days_held=days_held,
            trading_days_to_ex_date=days_to_ex,
        )
        last = float(sec.last_price or 0.0)
        rows.append(
            OpenPositionRow(
                id=t.id,
                symbol=sec.symbol,
                ex_date=sec.ex_date,
                buy=t.buy,
                buy_date=t.buy_date,
                quantity=t.quantity,
                days_held=days_held,
                expected_yield=tg.expected_yield,
                target_gain=tg.target_gain,
                target_sell=tg.target_sell,
                last_price=last,
                unrealized_gain=(last - t.buy) * t.quantity,
                unrealized_gain_percent=((last - t.buy) / t.buy * 100.0) if t.buy else 0.0,
            )
        )
    return rows


def classify_capital_gain(capital_gain: float) -> GainClassification:
    if capital_gain > 0:
        return "gain"
    if capital_gain < 0:
        return "loss"
    return "neutral"


def closed_positions(
    account: AccountView,
    securities: Iterable[SecurityView],
    *,
    holidays: Iterable[dt.date] = frozenset(),
) -> list[ClosedPositionRow]:
    secmap = _securities_by_id(securities)
    hs = holiday_set(holidays)
    rows: list[ClosedPositionRow] = []
    for t in account.trades:
        if t.sell == 0 or t.sell_date is None:
            continue
        sec = secmap.get(t.security_id)
        if sec is None:
            continue
        gain = (t.sell - t.buy) * t.quantity
        rows.append(
            ClosedPositionRow(
                id=t.id,
                symbol=sec.symbol,
                buy=t.buy,
                buy_date=t.buy_date,
                sell=t.sell,
                sell_date=t.sell_date,
                quantity=t.quantity,
                days_held=trading_days_between(t.buy_date, t.sell_date, hs),
                capital_gain=gain,
                capital_gain_percent=((t.sell - t.buy) / t.buy * 100.0) if t.buy else 0.0,
                gain_classification=classify_capital_gain(gain),
            )
        )
    return rows
