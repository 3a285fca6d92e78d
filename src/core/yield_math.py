from __future__ import annotations

import datetime as dt
import math
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any, Optional

from src.core.types import TradeView
from src.utils.time import EPOCH, add_months, to_date

# Months between distributions for the cadences we can project.
_CADENCE_MONTHS = {12: 1, 4: 3}


def _num(v: Any) -> float:
    if v is None or isinstance(v, bool):
        return 0.0
    try:
        f = float(v)
    except (TypeError, ValueError):
        return 0.0
    return f if math.isfinite(f) else 0.0


def _yield_percent(distribution: Any, distributions_per_year: Any, price: Any) -> float:
    d = _num(distribution)
    n = _num(distributions_per_year)
    p = _num(price)
    if d <= 0 or n <= 0 or p <= 0:
        return 0.0
    return 100.0 * n * (d / p)


def market_yield_percent(distribution: Any, distributions_per_year: Any, last_price: Any) -> float:
    """Annualized distribution as a percent of the last price; 0 when any input carries no signal."""
    return _yield_percent(distribution, distributions_per_year, last_price)


def weighted_average_price(trades: Iterable[TradeView]) -> float:
    """Quantity-weighted average buy price over the open trades given; 0 when nothing is open."""
    total_cost = 0.0
    total_qty = 0.0
    for t in trades:
        if not t.is_open:
            continue
        total_cost += _num(t.buy) * _num(t.quantity)
        total_qty += _num(t.quantity)
    return average_price(total_cost, total_qty)


def average_price(total_cost: float, total_quantity: float) -> float:
    return total_cost / total_quantity if total_quantity > 0 else 0.0


def purchase_yield_percent(distribution: Any, distributions_per_year: Any, weighted_avg_price: Any) -> float:
    return _yield_percent(distribution, distributions_per_year, weighted_avg_price)


def projected_ex_date(
    ex_date: Any,
    distributions_per_year: Any,
    today: dt.date,
    *,
    annual_fallback: bool = False,
) -> dt.date:
    """
    Next expected ex-date, used for ordering only.

    - missing ex-date -> epoch
    - ex-date after `today` -> unchanged
    - otherwise monthly payers roll forward 1 month at a time and quarterly
      payers 3 months at a time until strictly after `today`
    - any other cadence returns the stale date, unless `annual_fallback` is set,
      in which case it rolls forward a year at a time
    """
    d = to_date(ex_date)
    if d is None:
        return EPOCH
    today = to_date(today) or today
    if d > today:
        return d

    cadence = int(_num(distributions_per_year))
    step = _CADENCE_MONTHS.get(cadence)
    if step is None:
        if not annual_fallback:
            return d
        step = 12

    # Offsets are taken from the original date so month-end clamping does not drift.
    k = 1
    nxt = add_months(d, step)
    while nxt <= today:
        k += 1
        nxt = add_months(d, step * k)
    return nxt


@dataclass(frozen=True)
class TargetGain:
    expected_yield: float
    target_gain_factor: float
    target_gain: float
    target_sell: float


def target_gain_factor(days_held: Any, trading_days_to_ex_date: Any) -> float:
    denom = _num(trading_days_to_ex_date)
    if denom == 0:
        return 0.0
    return 3.0 * _num(days_held) / denom


def target_gain(
    *,
    distribution: Optional[float],
    quantity: float,
    days_held: int,
    trading_days_to_ex_date: int,
) -> float:
    """
    min(expected yield, 3 * days_held / trading_days_to_ex_date * distribution * quantity).

    Zero trading days to the ex-date yields a factor of 0 rather than a division error.
    """
    d = _num(distribution)
    if d == 0:
        return 0.0
    q = _num(quantity)
    expected = q * d
    factor = target_gain_factor(days_held, trading_days_to_ex_date)
    return min(expected, factor * d * q)


def target_sell_price(target_gain_amount: float, quantity: float, buy_price: float) -> float:
    q = _num(quantity)
    if q == 0:
        return _num(buy_price)
    return _num(target_gain_amount) / q + _num(buy_price)


def target_gain_for_trade(
    *,
    distribution: Optional[float],
    quantity: float,
    buy_price: float,
    days_held: int,
    trading_days_to_ex_date: int,
) -> TargetGain:
    d = _num(distribution)
    expected = _num(quantity) * d if d else 0.0
    gain = target_gain(
        distribution=distribution,
        quantity=quantity,
        days_held=days_held,
        trading_days_to_ex_date=trading_days_to_ex_date,
    )
    return TargetGain(
        expected_yield=expected,
        target_gain_factor=target_gain_factor(days_held, trading_days_to_ex_date),
        target_gain=gain,
        target_sell=target_sell_price(gain, quantity, buy_price),
    )
