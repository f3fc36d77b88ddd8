"""Tests for the management script helpers."""

import pytest

import manage
from ledger.exceptions import StoreError
from ledger.schemas.records import AssetSpec


@pytest.mark.asyncio
async def test_status_counts(ledger, listed_sword, bob):
    await ledger.assets.create("bob", AssetSpec(id="shield"))

    status = await manage._status(ledger)

    assert status == {"accounts": 2, "assets": 2, "listed": 1, "pending_trade": None}


@pytest.mark.asyncio
async def test_status_reports_pending_trade(ledger, flaky_store, listed_sword, bob):
    flaky_store.fail_put("alice")
    with pytest.raises(StoreError):
        await ledger.trading.buy("bob", "sword")

    status = await manage._status(ledger)

    assert status["pending_trade"] == "sword"


@pytest.mark.asyncio
async def test_run_operation(ledger):
    await manage._run_operation(
        ledger, "invoke", "createAccount", ['{"username": "alice", "balance": 3}']
    )

    result = await manage._run_operation(ledger, "query", "getAccount", ["alice"])

    assert result == {"username": "alice", "balance": 3}
