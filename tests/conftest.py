from __future__ import annotations

import datetime as dt
import sys
from pathlib import Path

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from src.core.types import AccountView, RiskGroupView, SecurityView, TradeView, UniverseSnapshot
from src.db.models import Base


@pytest.fixture()
def session() -> Session:
    engine = create_engine("sqlite:///:memory:", future=True)
    Base.metadata.create_all(bind=engine)
    SessionLocal = sessionmaker(bind=engine, class_=Session, autoflush=False, autocommit=False)
    with SessionLocal() as s:
        yield s


@pytest.fixture(autouse=True)
def _no_holiday_file(monkeypatch, tmp_path):
    # Keep a developer's holidays.yaml out of the tests.
    monkeypatch.setenv("HOLIDAYS_FILE", str(tmp_path / "missing-holidays.yaml"))


def make_snapshot(
    securities: list[SecurityView],
    trades: list[TradeView],
    *,
    risk_groups: list[RiskGroupView] | None = None,
    account_ids: list[str] | None = None,
    holidays: frozenset[dt.date] = frozenset(),
) -> UniverseSnapshot:
    ids = account_ids or sorted({t.account_id for t in trades})
    accounts = tuple(
        AccountView(id=a, name=f"Account {a}", trades=tuple(t for t in trades if t.account_id == a)) for a in ids
    )
    return UniverseSnapshot(
        trades=tuple(trades),
        securities=tuple(securities),
        risk_groups=tuple(risk_groups or ()),
        accounts=accounts,
        holidays=holidays,
    )


@pytest.fixture()
def snapshot_factory():
    return make_snapshot
