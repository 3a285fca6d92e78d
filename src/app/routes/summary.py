from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query

from src.app.db import universe_snapshot
from src.app.utils import jsonable
from src.core.summary import risk_group_cost_basis
from src.core.types import UniverseSnapshot

router = APIRouter(prefix="/summary", tags=["summary"])


@router.get("/risk-groups")
def risk_groups_summary(
    year: int = Query(..., ge=1900, le=9999),
    month: int = Query(..., ge=1, le=12),
    account: Optional[str] = Query(default=None),
    snapshot: UniverseSnapshot = Depends(universe_snapshot),
):
    rows = risk_group_cost_basis(
        snapshot.trades,
        snapshot.securities,
        snapshot.risk_groups,
        year=year,
        month=month,
        account_id=account or None,
    )
    return {"year": year, "month": month, "account": account, "rows": jsonable(rows)}
