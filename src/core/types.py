from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from typing import Literal, Optional

from pydantic import BaseModel, Field

ALL_ACCOUNTS = "all"

SortOrder = Literal[1, -1]
GainClassification = Literal["gain", "loss", "neutral"]


@dataclass(frozen=True)
class TradeView:
    """One buy lot; open while `sell_date` is None."""

    id: str
    account_id: str
    security_id: str
    buy: float
    quantity: float
    buy_date: dt.date
    sell: float = 0.0
    sell_date: Optional[dt.date] = None

    @property
    def is_open(self) -> bool:
        return self.sell_date is None


@dataclass(frozen=True)
class SecurityView:
    id: str
    symbol: str
    distribution: float = 0.0
    distributions_per_year: int = 0
    last_price: float = 0.0
    ex_date: Optional[dt.date] = None
    expired: bool = False
    risk_group_id: Optional[str] = None
    is_closed_end_fund: bool = False


@dataclass(frozen=True)
class RiskGroupView:
    id: str
    name: str


@dataclass(frozen=True)
class AccountView:
    id: str
    name: str
    trades: tuple[TradeView, ...] = ()


@dataclass(frozen=True)
class PositionTotals:
    total_cost: float = 0.0
    total_quantity: float = 0.0
    position: float = 0.0
    most_recent_sell_date: Optional[dt.date] = None
    most_recent_sell_price: Optional[float] = None


@dataclass(frozen=True)
class DisplayRow:
    security_id: str
    symbol: str
    risk_group: str
    distribution: float
    distributions_per_year: int
    last_price: float
    ex_date: Optional[dt.date]
    yield_percent: float
    avg_purchase_yield_percent: float = 0.0
    expired: Optional[bool] = False
    is_closed_end_fund: bool = False
    position: float = 0.0
    most_recent_sell_date: Optional[dt.date] = None
    most_recent_sell_price: Optional[float] = None


@dataclass(frozen=True)
class OpenPositionRow:
    id: str
    symbol: str
    ex_date: Optional[dt.date]
    buy: float
    buy_date: dt.date
    quantity: float
    days_held: int
    expected_yield: float
    target_gain: float
    target_sell: float
    last_price: float
    unrealized_gain: float
    unrealized_gain_percent: float


@dataclass(frozen=True)
class ClosedPositionRow:
    id: str
    symbol: str
    buy: float
    buy_date: dt.date
    sell: float
    sell_date: dt.date
    quantity: float
    days_held: int
    capital_gain: float
    capital_gain_percent: float
    gain_classification: GainClassification


@dataclass(frozen=True)
class RiskGroupCostBasis:
    risk_group_id: str
    risk_group_name: str
    total_cost_basis: float
    trade_count: int


@dataclass(frozen=True)
class UniverseSnapshot:
    """Read-only inputs for one pipeline run."""

    trades: tuple[TradeView, ...] = ()
    securities: tuple[SecurityView, ...] = ()
    risk_groups: tuple[RiskGroupView, ...] = ()
    accounts: tuple[AccountView, ...] = ()
    holidays: frozenset[dt.date] = field(default_factory=frozenset)


class SortCriterion(BaseModel):
    field: str
    order: SortOrder = 1


class UniverseQuery(BaseModel):
    symbol_filter: str = ""
    min_yield: Optional[float] = None
    risk_group_filter: Optional[str] = None
    expired_filter: Optional[bool] = None
    selected_account: str = ALL_ACCOUNTS
    sort_criteria: list[SortCriterion] = Field(default_factory=list)
