from __future__ import annotations

from collections.abc import Generator

from fastapi import Depends, HTTPException
from sqlalchemy.orm import Session

from src.core.errors import HolidayConfigError
from src.core.snapshot import load_snapshot
from src.core.types import UniverseSnapshot
from src.db.session import get_session


def db_session() -> Generator[Session, None, None]:
    session = get_session()
    try:
        yield session
    finally:
        session.close()


def universe_snapshot(session: Session = Depends(db_session)) -> UniverseSnapshot:
    try:
        return load_snapshot(session)
    except HolidayConfigError as e:
        raise HTTPException(status_code=500, detail=str(e)) from e
