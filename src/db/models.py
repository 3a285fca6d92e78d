from __future__ import annotations

import datetime as dt
from typing import Optional

try:
    from sqlalchemy import Boolean, Date, Float, ForeignKey, Index, Integer, String
    from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
except Exception as e:  # pragma: no cover
    raise RuntimeError(
        "Failed to import SQLAlchemy.\n\n"
        "Create a virtualenv and install the project:\n"
        "  python -m venv .venv\n"
        "  source .venv/bin/activate\n"
        "  pip install -e .\n\n"
        f"Original error: {type(e).__name__}: {e}"
    ) from e


class Base(DeclarativeBase):
    pass


class Account(Base):
    __tablename__ = "accounts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(200), unique=True, nullable=False)

    trades: Mapped[list["Trade"]] = relationship(back_populates="account", order_by="Trade.id")


class RiskGroup(Base):
    __tablename__ = "risk_groups"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)

    securities: Mapped[list["Universe"]] = relationship(back_populates="risk_group")


class Universe(Base):
    """One tradable security in the watch universe."""

    __tablename__ = "universe"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    symbol: Mapped[str] = mapped_column(String(32), unique=True, nullable=False)
    distribution: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    distributions_per_year: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    last_price: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    ex_date: Mapped[Optional[dt.date]] = mapped_column(Date)
    expired: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_closed_end_fund: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    risk_group_id: Mapped[Optional[int]] = mapped_column(ForeignKey("risk_groups.id"))

    risk_group: Mapped[Optional["RiskGroup"]] = relationship(back_populates="securities")
    trades: Mapped[list["Trade"]] = relationship(back_populates="universe")


class Trade(Base):
    __tablename__ = "trades"
    __table_args__ = (Index("ix_trades_account_universe", "account_id", "universe_id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    account_id: Mapped[int] = mapped_column(ForeignKey("accounts.id"), nullable=False)
    universe_id: Mapped[int] = mapped_column(ForeignKey("universe.id"), nullable=False)
    buy: Mapped[float] = mapped_column(Float, nullable=False)
    quantity: Mapped[float] = mapped_column(Float, nullable=False)
    buy_date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    sell: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    sell_date: Mapped[Optional[dt.date]] = mapped_column(Date)

    account: Mapped["Account"] = relationship(back_populates="trades")
    universe: Mapped["Universe"] = relationship(back_populates="trades")


class Holiday(Base):
    __tablename__ = "holidays"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    date: Mapped[dt.date] = mapped_column(Date, unique=True, nullable=False)
    name: Mapped[Optional[str]] = mapped_column(String(200))
