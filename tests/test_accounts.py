"""Tests for the account registry."""

import asyncio

import pytest

from ledger.exceptions import AlreadyExists, NotFound, StoreError, ValidationError
from ledger.schemas.records import AssetSpec
from ledger.services.index import ACCOUNTS_INDEX, ASSETS_INDEX


@pytest.mark.asyncio
async def test_create_then_get(ledger):
    """A created account is immediately readable."""
    created = await ledger.accounts.create("alice", 100)

    fetched = await ledger.accounts.get("alice")

    assert fetched == created
    assert fetched.balance == 100


@pytest.mark.asyncio
async def test_create_appends_to_index(ledger):
    await ledger.accounts.create("alice", 100)
    await ledger.accounts.create("bob", 0)

    assert await ledger.indexes.read(ACCOUNTS_INDEX) == ["alice", "bob"]


@pytest.mark.asyncio
async def test_duplicate_username(ledger, alice):
    """Second create fails and leaves the stored balance alone."""
    with pytest.raises(AlreadyExists):
        await ledger.accounts.create("alice", 999)

    assert (await ledger.accounts.get("alice")).balance == 100
    assert await ledger.indexes.read(ACCOUNTS_INDEX) == ["alice"]


@pytest.mark.asyncio
async def test_username_taken_by_asset(ledger, sword):
    """Accounts and assets share one keyspace."""
    with pytest.raises(AlreadyExists):
        await ledger.accounts.create("sword", 10)


@pytest.mark.asyncio
async def test_negative_balance_rejected(ledger):
    with pytest.raises(ValidationError):
        await ledger.accounts.create("alice", -1)

    assert await ledger.indexes.read(ACCOUNTS_INDEX) == []


@pytest.mark.asyncio
@pytest.mark.parametrize("username", ["", "_accountsIndex", "_tradeJournal"])
async def test_reserved_or_empty_username(ledger, username):
    """Bookkeeping keys cannot be overwritten by account creation."""
    with pytest.raises(ValidationError):
        await ledger.accounts.create(username, 10)


@pytest.mark.asyncio
async def test_get_missing_account(ledger):
    with pytest.raises(NotFound):
        await ledger.accounts.get("nobody")


@pytest.mark.asyncio
async def test_get_account_at_asset_key(ledger, sword):
    with pytest.raises(NotFound):
        await ledger.accounts.get("sword")


@pytest.mark.asyncio
async def test_list_in_creation_order(ledger):
    for name in ["carol", "alice", "bob"]:
        await ledger.accounts.create(name, 1)

    accounts = await ledger.accounts.list().to_list()

    assert [a.username for a in accounts] == ["carol", "alice", "bob"]


class TestPartialCommit:
    """Index append succeeds but the record write fails."""

    @pytest.mark.asyncio
    async def test_record_write_failure(self, ledger, flaky_store):
        flaky_store.fail_put("alice")

        with pytest.raises(StoreError):
            await ledger.accounts.create("alice", 100)

        # Dangling index entry, no record
        assert await ledger.indexes.read(ACCOUNTS_INDEX) == ["alice"]
        with pytest.raises(NotFound):
            await ledger.accounts.get("alice")

    @pytest.mark.asyncio
    async def test_retry_completes_without_duplicate(self, ledger, flaky_store):
        flaky_store.fail_put("alice")
        with pytest.raises(StoreError):
            await ledger.accounts.create("alice", 100)

        await ledger.accounts.create("alice", 100)

        assert await ledger.indexes.read(ACCOUNTS_INDEX) == ["alice"]
        assert (await ledger.accounts.get("alice")).balance == 100

    @pytest.mark.asyncio
    async def test_list_skips_dangling_entry(self, ledger, flaky_store, bob):
        flaky_store.fail_put("alice")
        with pytest.raises(StoreError):
            await ledger.accounts.create("alice", 100)

        accounts = await ledger.accounts.list().to_list()

        assert [a.username for a in accounts] == ["bob"]

    @pytest.mark.asyncio
    async def test_reconcile_removes_dangling_entry(self, ledger, flaky_store, bob):
        flaky_store.fail_put("alice")
        with pytest.raises(StoreError):
            await ledger.accounts.create("alice", 100)

        removed = await ledger.reconcile()

        assert removed[ACCOUNTS_INDEX] == ["alice"]
        assert await ledger.indexes.read(ACCOUNTS_INDEX) == ["bob"]


@pytest.mark.asyncio
async def test_concurrent_creates_keep_every_index_entry(ledger):
    """Index updates are not lost when creates run concurrently."""
    names = [f"user{i}" for i in range(10)]

    await asyncio.gather(*(ledger.accounts.create(n, i) for i, n in enumerate(names)))

    index = await ledger.indexes.read(ACCOUNTS_INDEX)
    assert sorted(index) == sorted(names)
    assert len(index) == len(set(index))


@pytest.mark.asyncio
async def test_concurrent_duplicate_creates(ledger):
    """Only one of several concurrent creates of one username succeeds."""
    results = await asyncio.gather(
        *(ledger.accounts.create("alice", i) for i in range(5)),
        return_exceptions=True,
    )

    assert sum(1 for r in results if not isinstance(r, Exception)) == 1
    assert all(isinstance(r, AlreadyExists) for r in results if isinstance(r, Exception))
    assert await ledger.indexes.read(ACCOUNTS_INDEX) == ["alice"]


@pytest.mark.asyncio
async def test_asset_creation_does_not_touch_account_index(ledger, alice):
    await ledger.assets.create("alice", AssetSpec(id="shield"))

    assert await ledger.indexes.read(ACCOUNTS_INDEX) == ["alice"]


@pytest.mark.asyncio
async def test_concurrent_account_and_asset_create_same_id(ledger, bob):
    """Accounts and assets share one keyspace, so only one create of an id wins."""
    account, asset = await asyncio.gather(
        ledger.accounts.create("x", 100),
        ledger.assets.create("bob", AssetSpec(id="x")),
        return_exceptions=True,
    )

    assert sum(isinstance(r, AlreadyExists) for r in (account, asset)) == 1
    accounts_index = await ledger.indexes.read(ACCOUNTS_INDEX)
    assets_index = await ledger.indexes.read(ASSETS_INDEX)
    if isinstance(asset, AlreadyExists):
        assert "x" in accounts_index
        assert "x" not in assets_index
    else:
        assert "x" in assets_index
        assert "x" not in accounts_index
