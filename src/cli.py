from __future__ import annotations

import datetime as dt
import json
import logging
import os
from typing import Optional

import typer
from dotenv import load_dotenv

from src.app.utils import jsonable
from src.core.errors import UniverseError
from src.core.types import ALL_ACCOUNTS
from src.utils.money import format_percent, format_usd
from src.utils.time import format_date, today as current_date

app = typer.Typer(help="Distribution management CLI")


@app.callback()
def _main() -> None:
    load_dotenv()
    logging.basicConfig(level=os.environ.get("LOG_LEVEL", "WARNING").upper())


def _check_runtime() -> None:
    try:
        import sqlalchemy  # noqa: F401
    except Exception as e:
        typer.echo(
            "Runtime dependency error: SQLAlchemy failed to import.\n"
            "Create a venv and run:\n"
            "  pip install -e .\n\n"
            f"Original error: {type(e).__name__}: {e}",
            err=True,
        )
        raise typer.Exit(code=1)


def _fail(e: UniverseError) -> None:
    typer.echo(f"Error: {e}", err=True)
    raise typer.Exit(code=2)


def _parse_today(raw: Optional[str]) -> dt.date:
    return dt.date.fromisoformat(raw) if raw else current_date()


@app.command("init-db")
def init_db_cmd():
    _check_runtime()
    from src.db.init_db import init_db

    init_db()
    typer.echo("Database initialized")


@app.command("universe")
def universe_cmd(
    symbol: str = typer.Option("", help="Case-insensitive symbol substring"),
    min_yield: Optional[float] = typer.Option(None, help="Minimum market yield percent"),
    risk_group: Optional[str] = typer.Option(None, help="Exact risk group name"),
    expired: Optional[bool] = typer.Option(None, "--expired/--active", help="Show only expired or only active"),
    account: str = typer.Option(ALL_ACCOUNTS, help="Account id or 'all'"),
    sort: list[str] = typer.Option([], help="field[:1|-1|asc|desc], repeatable"),
    today: Optional[str] = typer.Option(None, help="Override today's date (YYYY-MM-DD)"),
    as_json: bool = typer.Option(False, "--json", help="Print JSON instead of a table"),
):
    _check_runtime()
    from src.core.snapshot import load_snapshot
    from src.core.types import UniverseQuery
    from src.core.universe import filter_and_sort_universe
    from src.core.universe_sort import parse_sort_spec
    from src.db.session import get_session

    try:
        criteria = [parse_sort_spec(s) for s in sort]
    except UniverseError as e:
        _fail(e)
    query = UniverseQuery(
        symbol_filter=symbol,
        min_yield=min_yield,
        risk_group_filter=risk_group,
        expired_filter=expired,
        selected_account=account,
        sort_criteria=criteria,
    )
    with get_session() as session:
        try:
            snapshot = load_snapshot(session)
        except UniverseError as e:
            _fail(e)
    rows = filter_and_sort_universe(snapshot, query, today=_parse_today(today))
    if as_json:
        typer.echo(json.dumps(jsonable(rows), indent=2))
        return
    for r in rows:
        typer.echo(
            f"{r.symbol:<8} {r.risk_group:<16} yield={format_percent(r.yield_percent):>8} "
            f"avg={format_percent(r.avg_purchase_yield_percent):>8} ex={format_date(r.ex_date):<10} "
            f"pos={format_usd(r.position):>12}{'  EXPIRED' if r.expired else ''}"
        )
    typer.echo(f"{len(rows)} rows")


@app.command("open-positions")
def open_positions_cmd(
    account: str = typer.Option(..., help="Account id"),
    today: Optional[str] = typer.Option(None, help="Override today's date (YYYY-MM-DD)"),
):
    _check_runtime()
    from src.core.positions import find_account, open_positions
    from src.core.snapshot import load_snapshot
    from src.db.session import get_session

    try:
        with get_session() as session:
            snapshot = load_snapshot(session)
        acct = find_account(snapshot.accounts, account)
    except UniverseError as e:
        _fail(e)
    for p in open_positions(acct, snapshot.securities, today=_parse_today(today), holidays=snapshot.holidays):
        typer.echo(
            f"{p.symbol:<8} {format_date(p.buy_date)} qty={p.quantity:g} buy={format_usd(p.buy)} "
            f"held={p.days_held}d target={format_usd(p.target_sell)} gain={format_usd(p.unrealized_gain)}"
        )


@app.command("closed-positions")
def closed_positions_cmd(account: str = typer.Option(..., help="Account id")):
    _check_runtime()
    from src.core.positions import closed_positions, find_account
    from src.core.snapshot import load_snapshot
    from src.core.summary import capital_gains_total
    from src.db.session import get_session

    try:
        with get_session() as session:
            snapshot = load_snapshot(session)
        acct = find_account(snapshot.accounts, account)
    except UniverseError as e:
        _fail(e)
    for p in closed_positions(acct, snapshot.securities, holidays=snapshot.holidays):
        typer.echo(
            f"{p.symbol:<8} {format_date(p.buy_date)} -> {format_date(p.sell_date)} held={p.days_held}d "
            f"{p.gain_classification}={format_usd(p.capital_gain)} ({format_percent(p.capital_gain_percent)})"
        )
    typer.echo(f"Total capital gains: {format_usd(capital_gains_total(acct.trades))}")


@app.command("toggle-sort")
def toggle_sort_cmd(
    field: str = typer.Argument(..., help="Column to cycle"),
    current: list[str] = typer.Option([], help="Current criteria as field:order, repeatable"),
):
    from src.core.universe_sort import parse_sort_spec, toggle_sort

    try:
        criteria = [parse_sort_spec(s) for s in current]
    except UniverseError as e:
        _fail(e)
    for c in toggle_sort(criteria, field):
        typer.echo(f"{c.field}:{c.order}")


if __name__ == "__main__":
    app()
