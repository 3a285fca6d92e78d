from __future__ import annotations

import dataclasses
from collections.abc import Callable, Iterable, Sequence
from typing import Optional

from src.core.positions import aggregate_position, average_purchase_yield, trades_by_security
from src.core.types import ALL_ACCOUNTS, DisplayRow, SecurityView, TradeView


def apply_symbol_filter(rows: Sequence[DisplayRow], symbol_filter: Optional[str]) -> list[DisplayRow]:
    needle = (symbol_filter or "").strip().lower()
    if not needle:
        return list(rows)
    return [r for r in rows if needle in (r.symbol or "").lower()]


def apply_yield_filter(rows: Sequence[DisplayRow], min_yield: Optional[float]) -> list[DisplayRow]:
    if min_yield is None or min_yield <= 0:
        return list(rows)
    return [r for r in rows if r.yield_percent and r.yield_percent >= min_yield]


def apply_risk_group_filter(rows: Sequence[DisplayRow], risk_group_filter: Optional[str]) -> list[DisplayRow]:
    # Whitespace is significant: " Income" matches nothing.
    if not risk_group_filter:
        return list(rows)
    return [r for r in rows if r.risk_group == risk_group_filter]


def apply_account_scope(
    rows: Sequence[DisplayRow],
    selected_account: str,
    *,
    trades: Sequence[TradeView],
    securities: Iterable[SecurityView],
) -> list[DisplayRow]:
    """
    Recompute the position-dependent columns for the selected account.

    For ALL_ACCOUNTS only the purchase yield is filled in (merged over every
    account); position and last-sell columns keep their merged values.
    """
    secmap = {s.id: s for s in securities}
    by_security = trades_by_security(trades)
    out: list[DisplayRow] = []
    for r in rows:
        sec = secmap.get(r.security_id)
        sec_trades = by_security.get(r.security_id, [])
        if selected_account == ALL_ACCOUNTS:
            out.append(
                dataclasses.replace(
                    r, avg_purchase_yield_percent=average_purchase_yield(sec, sec_trades, scope=ALL_ACCOUNTS)
                )
            )
            continue
        totals = aggregate_position(sec_trades, security_id=r.security_id, scope=selected_account)
        out.append(
            dataclasses.replace(
                r,
                position=totals.position,
                most_recent_sell_date=totals.most_recent_sell_date,
                most_recent_sell_price=totals.most_recent_sell_price,
                avg_purchase_yield_percent=average_purchase_yield(sec, sec_trades, scope=selected_account),
            )
        )
    return out


def apply_expired_with_positions_filter(
    rows: Sequence[DisplayRow],
    expired_filter: Optional[bool],
    selected_account: str,
    has_positions_in_any_account: Callable[[str], bool],
) -> list[DisplayRow]:
    """
    Default visibility when no explicit expired filter is set: hide expired
    securities nobody still holds.

    For a specific account the row's own `position` decides; for ALL_ACCOUNTS
    every account is checked separately via `has_positions_in_any_account`.
    """
    if expired_filter is not None:
        return list(rows)
    out: list[DisplayRow] = []
    for r in rows:
        if not r.expired:
            out.append(r)
            continue
        if selected_account == ALL_ACCOUNTS:
            if has_positions_in_any_account(r.security_id):
                out.append(r)
        elif r.position > 0:
            out.append(r)
    return out


def apply_expired_filter(rows: Sequence[DisplayRow], expired_filter: Optional[bool]) -> list[DisplayRow]:
    if expired_filter is None:
        return list(rows)
    return [r for r in rows if bool(r.expired) == expired_filter]
