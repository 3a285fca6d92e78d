from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from src.app.db import universe_snapshot
from src.app.utils import jsonable
from src.core.errors import AccountNotFoundError
from src.core.positions import closed_positions, find_account, open_positions
from src.core.summary import capital_gains_total
from src.core.types import UniverseSnapshot
from src.utils.time import today as current_date

router = APIRouter(prefix="/accounts", tags=["positions"])


@router.get("/{account_id}/open-positions")
def account_open_positions(account_id: str, snapshot: UniverseSnapshot = Depends(universe_snapshot)):
    try:
        account = find_account(snapshot.accounts, account_id)
    except AccountNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    rows = open_positions(account, snapshot.securities, today=current_date(), holidays=snapshot.holidays)
    return {"account_id": account.id, "account_name": account.name, "rows": jsonable(rows)}


@router.get("/{account_id}/closed-positions")
def account_closed_positions(account_id: str, snapshot: UniverseSnapshot = Depends(universe_snapshot)):
    try:
        account = find_account(snapshot.accounts, account_id)
    except AccountNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    rows = closed_positions(account, snapshot.securities, holidays=snapshot.holidays)
    return {
        "account_id": account.id,
        "account_name": account.name,
        "capital_gains": capital_gains_total(account.trades),
        "rows": jsonable(rows),
    }
