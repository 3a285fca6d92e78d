from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from src.app.db import universe_snapshot
from src.app.utils import jsonable
from src.core.errors import InvalidSortSpecError
from src.core.types import ALL_ACCOUNTS, UniverseQuery, UniverseSnapshot
from src.core.universe import filter_and_sort_universe
from src.core.universe_sort import parse_sort_spec
from src.utils.time import today as current_date

router = APIRouter(prefix="/universe", tags=["universe"])


@router.get("")
def universe_rows(
    symbol: str = Query(default=""),
    min_yield: Optional[float] = Query(default=None),
    risk_group: Optional[str] = Query(default=None),
    expired: Optional[bool] = Query(default=None),
    account: str = Query(default=ALL_ACCOUNTS),
    sort: list[str] = Query(default=[]),
    snapshot: UniverseSnapshot = Depends(universe_snapshot),
):
    try:
        criteria = [parse_sort_spec(s) for s in sort]
    except InvalidSortSpecError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e

    query = UniverseQuery(
        symbol_filter=symbol,
        min_yield=min_yield,
        risk_group_filter=risk_group,
        expired_filter=expired,
        selected_account=account or ALL_ACCOUNTS,
        sort_criteria=criteria,
    )
    rows = filter_and_sort_universe(snapshot, query, today=current_date())
    return {"count": len(rows), "query": jsonable(query), "rows": jsonable(rows)}
