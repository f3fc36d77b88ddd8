"""Tests for named-operation dispatch over string arguments."""

import json

import pytest

from ledger.exceptions import AlreadyExists, InsufficientFunds, InvalidPrice, NotFound, ValidationError
from ledger.services.dispatch import Dispatcher, parse_bool, parse_int


@pytest.fixture
def dispatcher(ledger):
    return Dispatcher(ledger)


def account_json(username, balance):
    return json.dumps({"username": username, "balance": balance})


class TestArgumentParsing:
    @pytest.mark.parametrize("value", ["1", "t", "T", "TRUE", "true", "True"])
    def test_true_spellings(self, value):
        assert parse_bool(value) is True

    @pytest.mark.parametrize("value", ["0", "f", "F", "FALSE", "false", "False"])
    def test_false_spellings(self, value):
        assert parse_bool(value) is False

    @pytest.mark.parametrize("value", ["yes", "", "tRuE"])
    def test_invalid_bool(self, value):
        with pytest.raises(ValidationError):
            parse_bool(value)

    def test_int(self):
        assert parse_int("50", "price") == 50
        assert parse_int("-3", "price") == -3

    @pytest.mark.parametrize("value", ["", "abc", "1.5", " 5", "1_000"])
    def test_invalid_int(self, value):
        with pytest.raises(ValidationError):
            parse_int(value, "price")


@pytest.mark.asyncio
async def test_full_flow(dispatcher):
    """Operations driven entirely by string arguments."""
    await dispatcher.invoke("createAccount", [account_json("alice", 100)])
    await dispatcher.invoke("createAccount", [account_json("bob", 100)])
    await dispatcher.invoke("createAsset", ["alice", json.dumps({"id": "sword", "name": "Sword"})])
    await dispatcher.invoke("sell", ["alice", "sword", "50"])

    assert await dispatcher.query("getAssets", ["true"]) == [
        {"id": "sword", "name": "Sword", "owner": "alice", "listedPrice": 50, "forSale": True}
    ]

    buyer = await dispatcher.invoke("buy", ["bob", "sword"])

    assert buyer == {"username": "bob", "balance": 50}
    assert await dispatcher.query("getAccount", ["alice"]) == {"username": "alice", "balance": 150}
    assert await dispatcher.query("getAssets", ["true"]) == []
    assert await dispatcher.query("getAssets", ["false", "bob"]) == [
        {"id": "sword", "name": "Sword", "owner": "bob", "listedPrice": 0, "forSale": False}
    ]


@pytest.mark.asyncio
async def test_invoke_returns_none(dispatcher):
    assert await dispatcher.invoke("createAccount", [account_json("alice", 1)]) is None


@pytest.mark.asyncio
async def test_get_missing_account_is_null(dispatcher):
    assert await dispatcher.query("getAccount", ["nobody"]) is None


@pytest.mark.asyncio
async def test_create_asset_ignores_record_owner(dispatcher):
    record = json.dumps({"id": "sword", "name": "Sword", "owner": "mallory", "forSale": True})

    await dispatcher.invoke("createAsset", ["alice", record])

    [asset] = await dispatcher.query("getAssets", ["false"])
    assert asset["owner"] == "alice"
    assert asset["forSale"] is False


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "kind, function, args",
    [
        ("invoke", "init", []),
        ("invoke", "createAccount", []),
        ("invoke", "createAsset", ["alice"]),
        ("invoke", "sell", ["alice", "sword"]),
        ("invoke", "buy", ["bob"]),
        ("query", "getAccount", []),
        ("query", "getAssets", []),
        ("query", "getAssets", ["true", "alice", "extra"]),
    ],
)
async def test_wrong_argument_count(dispatcher, kind, function, args):
    with pytest.raises(ValidationError, match="Incorrect number of arguments"):
        await getattr(dispatcher, kind)(function, args)


@pytest.mark.asyncio
async def test_init_accepts_one_argument(dispatcher):
    assert await dispatcher.invoke("init", ["anything"]) is None


@pytest.mark.asyncio
@pytest.mark.parametrize("raw", ["not json", "null", '{"username": "alice"}', '{"username": "a", "balance": -1}'])
async def test_malformed_account_record(dispatcher, raw):
    with pytest.raises(ValidationError):
        await dispatcher.invoke("createAccount", [raw])


@pytest.mark.asyncio
async def test_non_numeric_price(dispatcher):
    with pytest.raises(ValidationError):
        await dispatcher.invoke("sell", ["alice", "sword", "fifty"])


@pytest.mark.asyncio
async def test_zero_price(dispatcher):
    await dispatcher.invoke("createAccount", [account_json("alice", 1)])
    await dispatcher.invoke("createAsset", ["alice", json.dumps({"id": "sword"})])

    with pytest.raises(InvalidPrice):
        await dispatcher.invoke("sell", ["alice", "sword", "0"])


@pytest.mark.asyncio
async def test_unknown_functions(dispatcher):
    with pytest.raises(ValidationError):
        await dispatcher.invoke("mint", [])
    with pytest.raises(ValidationError):
        await dispatcher.query("buy", ["bob", "sword"])


@pytest.mark.asyncio
async def test_ledger_errors_propagate(dispatcher):
    await dispatcher.invoke("createAccount", [account_json("alice", 100)])

    with pytest.raises(AlreadyExists):
        await dispatcher.invoke("createAccount", [account_json("alice", 5)])
    with pytest.raises(NotFound):
        await dispatcher.invoke("buy", ["alice", "nothing"])


@pytest.mark.asyncio
async def test_insufficient_funds(dispatcher):
    await dispatcher.invoke("createAccount", [account_json("alice", 100)])
    await dispatcher.invoke("createAccount", [account_json("bob", 0)])
    await dispatcher.invoke("createAsset", ["alice", json.dumps({"id": "sword"})])
    await dispatcher.invoke("sell", ["alice", "sword", "50"])

    with pytest.raises(InsufficientFunds):
        await dispatcher.invoke("buy", ["bob", "sword"])
