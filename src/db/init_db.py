from __future__ import annotations

import logging
from pathlib import Path

from sqlalchemy.orm import Session

from src.db.models import Base, RiskGroup
from src.db.session import get_database_url, get_engine, get_session

log = logging.getLogger(__name__)

DEFAULT_RISK_GROUPS = ("Equities", "Income", "Tax Free Income")


def ensure_risk_groups(session: Session) -> list[RiskGroup]:
    out: list[RiskGroup] = []
    for name in DEFAULT_RISK_GROUPS:
        grp = session.query(RiskGroup).filter(RiskGroup.name == name).one_or_none()
        if grp is None:
            grp = RiskGroup(name=name)
            session.add(grp)
            session.flush()
            log.info("Created risk group %s", name)
        out.append(grp)
    return out


def _ensure_sqlite_dir(url: str) -> None:
    prefix = "sqlite:///"
    if not url.startswith(prefix) or url.endswith(":memory:"):
        return
    Path(url[len(prefix):]).parent.mkdir(parents=True, exist_ok=True)


def init_db() -> None:
    _ensure_sqlite_dir(get_database_url())
    engine = get_engine()
    Base.metadata.create_all(bind=engine)
    with get_session() as session:
        ensure_risk_groups(session)
        session.commit()
