#!/usr/bin/env python3
"""
Management script for the asset ledger.

Usage (via API):
    python manage.py accounts load [-f data/accounts.json] [--base-url http://localhost:8000]
    python manage.py accounts show [--base-url http://localhost:8000]

Usage (direct DB access):
    python manage.py db status
    python manage.py db reconcile
    python manage.py db recover
    python manage.py db invoke createAccount '{"username": "alice", "balance": 100}'
    python manage.py db query getAssets true
"""

import asyncio
import json
from pathlib import Path

import click
import httpx

from ledger.config import settings
from ledger.database import AsyncSessionLocal, init_db
from ledger.exceptions import LedgerError
from ledger.services.dispatch import Dispatcher
from ledger.services.ledger import Ledger
from ledger.store import SqlStateStore


DEFAULT_BASE_URL = "http://localhost:8000"


def _ledger() -> Ledger:
    """Build a ledger over the configured database."""
    store = SqlStateStore(AsyncSessionLocal, timeout=settings.store_timeout)
    return Ledger.from_settings(store, settings)


# ============================================================================
# Direct database operations (internal)
# ============================================================================


async def _status(ledger: Ledger) -> dict:
    """Count indexed records and report any pending trade."""
    accounts = await ledger.indexes.read(ledger.accounts.index_name)
    assets = await ledger.indexes.read(ledger.assets.index_name)
    listed = await ledger.assets.list().to_list()
    pending = await ledger.trading.pending()
    return {
        "accounts": len(accounts),
        "assets": len(assets),
        "listed": sum(1 for a in listed if a.for_sale),
        "pending_trade": pending.asset_id if pending else None,
    }


async def _run_operation(ledger: Ledger, kind: str, function: str, args: list[str]):
    """Run a named invoke/query operation against the ledger."""
    dispatcher = Dispatcher(ledger)
    if kind == "invoke":
        return await dispatcher.invoke(function, args)
    return await dispatcher.query(function, args)


def _run(coro_factory):
    """Initialize the database and run an async helper against a fresh ledger."""

    async def run():
        await init_db()
        return await coro_factory(_ledger())

    return asyncio.run(run())


# ============================================================================
# API operations
# ============================================================================


def _api_load_accounts(filepath: Path, base_url: str):
    """Load accounts via API."""
    with open(filepath) as f:
        accounts_data = json.load(f)

    loaded = 0
    skipped = 0
    errors = 0

    with httpx.Client(base_url=base_url, timeout=30) as client:
        for data in accounts_data:
            response = client.post("/api/v1/accounts", json=data)

            if response.status_code == 201:
                loaded += 1
                click.echo(f"  Loaded {data['username']}: {data.get('balance', 0)}")
            elif response.status_code == 409:
                skipped += 1
                click.echo(f"  Skipped {data['username']} (already exists)")
            else:
                errors += 1
                error_detail = response.json().get("detail", response.text)
                click.echo(f"  Error {data.get('username')}: {error_detail}", err=True)

    return loaded, skipped, errors


def _api_show_accounts(base_url: str):
    """Get accounts via API."""
    with httpx.Client(base_url=base_url, timeout=30) as client:
        response = client.get("/api/v1/accounts")
        if response.status_code == 404:
            raise click.ClickException(
                f"Endpoint not found. Is the Asset Ledger API running at {base_url}?"
            )
        response.raise_for_status()
        return response.json()


# ============================================================================
# CLI: Main group
# ============================================================================


@click.group()
def cli():
    """Asset ledger management commands."""
    pass


# ============================================================================
# CLI: accounts (via API)
# ============================================================================


@cli.group()
def accounts():
    """Manage accounts (via API)."""
    pass


@accounts.command("load")
@click.option(
    "--file", "-f",
    default="data/accounts.json",
    type=click.Path(exists=True),
    help="JSON file with account records",
)
@click.option(
    "--base-url", "-u",
    default=DEFAULT_BASE_URL,
    help=f"API base URL (default: {DEFAULT_BASE_URL})",
)
def accounts_load(file, base_url):
    """Load accounts from a JSON file via API."""
    click.echo(f"Loading accounts from {file} via {base_url}...")

    try:
        loaded, skipped, errors = _api_load_accounts(Path(file), base_url)
        click.echo(f"\nDone: {loaded} loaded, {skipped} skipped, {errors} errors")
    except httpx.ConnectError:
        click.echo(f"\nError: Could not connect to {base_url}", err=True)
        click.echo("Is the server running? Start it with: uvicorn ledger.main:app", err=True)
        raise SystemExit(1)


@accounts.command("show")
@click.option(
    "--base-url", "-u",
    default=DEFAULT_BASE_URL,
    help=f"API base URL (default: {DEFAULT_BASE_URL})",
)
def accounts_show(base_url):
    """Show all accounts via API."""
    try:
        accounts_list = _api_show_accounts(base_url)
    except httpx.ConnectError:
        click.echo(f"\nError: Could not connect to {base_url}", err=True)
        click.echo("Is the server running? Start it with: uvicorn ledger.main:app", err=True)
        raise SystemExit(1)

    if not accounts_list:
        click.echo("No accounts found.")
        return

    click.echo(f"\n{'Username':<30} {'Balance':>15}")
    click.echo("-" * 46)
    for a in accounts_list:
        click.echo(f"{a['username']:<30} {a['balance']:>15,}")
    click.echo(f"\nTotal: {len(accounts_list)} accounts")


# ============================================================================
# CLI: db (direct database access)
# ============================================================================


@cli.group()
def db():
    """Direct database management (bypasses API)."""
    pass


@db.command("status")
def db_status():
    """Show record counts and any pending trade."""
    status = _run(_status)

    click.echo("\nLedger Status:")
    click.echo("-" * 30)
    click.echo(f"  {'accounts':<15} {status['accounts']:>10,}")
    click.echo(f"  {'assets':<15} {status['assets']:>10,}")
    click.echo(f"  {'listed':<15} {status['listed']:>10,}")
    click.echo("-" * 30)
    if status["pending_trade"]:
        click.echo(f"  Pending trade on asset '{status['pending_trade']}' (run: db recover)")


@db.command("reconcile")
def db_reconcile():
    """Remove dangling and duplicate index entries."""
    removed = _run(lambda ledger: ledger.reconcile())

    for index_name, ids in removed.items():
        if ids:
            click.echo(f"  {index_name}: removed {', '.join(ids)}")
        else:
            click.echo(f"  {index_name}: consistent")


@db.command("recover")
def db_recover():
    """Roll forward a trade left pending by a failed buy."""
    intent = _run(lambda ledger: ledger.trading.recover())

    if intent is None:
        click.echo("No pending trade.")
    else:
        click.echo(
            f"Completed trade of '{intent.asset_id}' from {intent.seller} to {intent.buyer} "
            f"at {intent.price}"
        )


def _echo_operation(kind: str, function: str, args: tuple[str, ...]) -> None:
    try:
        result = _run(lambda ledger: _run_operation(ledger, kind, function, list(args)))
    except LedgerError as e:
        raise click.ClickException(f"{e.kind}: {e.message}")
    click.echo(json.dumps(result, indent=2))


@db.command("invoke")
@click.argument("function")
@click.argument("args", nargs=-1)
def db_invoke(function, args):
    """Run a state-changing operation (createAccount, createAsset, sell, buy)."""
    _echo_operation("invoke", function, args)


@db.command("query")
@click.argument("function")
@click.argument("args", nargs=-1)
def db_query(function, args):
    """Run a read-only operation (getAccount, getAssets)."""
    _echo_operation("query", function, args)


if __name__ == "__main__":
    cli()
