from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from src.core.holidays_config import load_config_holidays
from src.core.types import AccountView, RiskGroupView, SecurityView, TradeView, UniverseSnapshot
from src.db.models import Account, Holiday, RiskGroup, Trade, Universe
from src.utils.money import to_float

log = logging.getLogger(__name__)


def _trade_view(t: Trade) -> TradeView:
    return TradeView(
        id=str(t.id),
        account_id=str(t.account_id),
        security_id=str(t.universe_id),
        buy=to_float(t.buy),
        quantity=to_float(t.quantity),
        buy_date=t.buy_date,
        sell=to_float(t.sell),
        sell_date=t.sell_date,
    )


def _security_view(u: Universe) -> SecurityView:
    return SecurityView(
        id=str(u.id),
        symbol=u.symbol,
        distribution=to_float(u.distribution),
        distributions_per_year=int(u.distributions_per_year or 0),
        last_price=to_float(u.last_price),
        ex_date=u.ex_date,
        expired=bool(u.expired),
        risk_group_id=str(u.risk_group_id) if u.risk_group_id is not None else None,
        is_closed_end_fund=bool(u.is_closed_end_fund),
    )


def load_snapshot(session: Session, *, include_config_holidays: bool = True) -> UniverseSnapshot:
    """
    Read trades, securities, risk groups, accounts and holidays in one pass.

    Everything is converted to frozen views so the pipeline never touches ORM
    state. Holidays are the union of the `holidays` table and the YAML file.
    """
    trades = tuple(_trade_view(t) for t in session.query(Trade).order_by(Trade.id).all())
    securities = tuple(_security_view(u) for u in session.query(Universe).order_by(Universe.id).all())
    risk_groups = tuple(
        RiskGroupView(id=str(g.id), name=g.name) for g in session.query(RiskGroup).order_by(RiskGroup.id).all()
    )

    by_account: dict[str, list[TradeView]] = {}
    for t in trades:
        by_account.setdefault(t.account_id, []).append(t)
    accounts = tuple(
        AccountView(id=str(a.id), name=a.name, trades=tuple(by_account.get(str(a.id), ())))
        for a in session.query(Account).order_by(Account.id).all()
    )

    holidays = {h.date for h in session.query(Holiday).all()}
    if include_config_holidays:
        extra, _path = load_config_holidays()
        holidays |= extra

    log.debug(
        "Loaded snapshot: %d trades, %d securities, %d risk groups, %d accounts, %d holidays",
        len(trades),
        len(securities),
        len(risk_groups),
        len(accounts),
        len(holidays),
    )
    return UniverseSnapshot(
        trades=trades,
        securities=securities,
        risk_groups=risk_groups,
        accounts=accounts,
        holidays=frozenset(holidays),
    )
