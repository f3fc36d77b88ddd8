"""Operation dispatch - the named-operation surface of the ledger.

Operations take positional string arguments, as sent by ledger clients:

    invoke: init, createAccount, createAsset, sell, buy
    query:  getAccount, getAssets

Results are JSON-ready values using the persisted field names.
"""

import json
import logging
import re
from typing import Any, Awaitable, Callable

from pydantic import ValidationError as PydanticValidationError

from ledger.exceptions import NotFound, ValidationError
from ledger.schemas.records import Account, AssetSpec
from ledger.services.assets import AssetFilter
from ledger.services.ledger import Ledger

logger = logging.getLogger(__name__)

Handler = Callable[[list[str]], Awaitable[Any]]

_TRUE = {"1", "t", "T", "TRUE", "true", "True"}
_FALSE = {"0", "f", "F", "FALSE", "false", "False"}
_INT = re.compile(r"[+-]?[0-9]+")


def expect_args(args: list[str], *counts: int) -> None:
    """Raise ValidationError unless len(args) is one of counts."""
    if len(args) not in counts:
        expected = " or ".join(str(c) for c in counts)
        raise ValidationError(f"Incorrect number of arguments. Expecting {expected}")


def parse_bool(value: str) -> bool:
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ValidationError(f"Invalid boolean '{value}'")


def parse_int(value: str, label: str) -> int:
    if not _INT.fullmatch(value):
        raise ValidationError(f"Invalid {label} '{value}'")
    return int(value)


def parse_record(model, raw: str, label: str):
    """Parse a JSON argument into a record model."""
    try:
        return model.model_validate(json.loads(raw))
    except (json.JSONDecodeError, PydanticValidationError) as e:
        raise ValidationError(f"Malformed {label} record: {e}")


def dump(record) -> dict:
    return record.model_dump(by_alias=True)


class Dispatcher:
    """Routes operation names to ledger services."""

    def __init__(self, ledger: Ledger):
        self.ledger = ledger
        self.invokes: dict[str, Handler] = {
            "init": self.init,
            "createAccount": self.create_account,
            "createAsset": self.create_asset,
            "sell": self.sell,
            "buy": self.buy,
        }
        self.queries: dict[str, Handler] = {
            "getAccount": self.get_account,
            "getAssets": self.get_assets,
        }

    async def invoke(self, function: str, args: list[str]) -> Any:
        """Run a state-changing operation."""
        logger.info("invoke is running", extra={"function": function})
        handler = self.invokes.get(function)
        if handler is None:
            raise ValidationError(f"Received unknown invoke function '{function}'")
        return await handler(args)

    async def query(self, function: str, args: list[str]) -> Any:
        """Run a read-only operation."""
        logger.info("query is running", extra={"function": function})
        handler = self.queries.get(function)
        if handler is None:
            raise ValidationError(f"Received unknown query function '{function}'")
        return await handler(args)

    # --- invoke handlers ---

    async def init(self, args: list[str]) -> None:
        expect_args(args, 1)
        return None

    async def create_account(self, args: list[str]) -> None:
        # 0  account record JSON
        expect_args(args, 1)
        account = parse_record(Account, args[0], "account")
        await self.ledger.accounts.create(account.username, account.balance)
        return None

    async def create_asset(self, args: list[str]) -> None:
        # 0  owner username, 1  asset record JSON
        expect_args(args, 2)
        spec = parse_record(AssetSpec, args[1], "asset")
        await self.ledger.assets.create(args[0], spec)
        return None

    async def sell(self, args: list[str]) -> None:
        # 0  owner username, 1  asset id, 2  price
        expect_args(args, 3)
        price = parse_int(args[2], "price")
        await self.ledger.trading.list(args[1], price, seller=args[0])
        return None

    async def buy(self, args: list[str]) -> dict:
        # 0  buyer username, 1  asset id
        expect_args(args, 2)
        buyer = await self.ledger.trading.buy(args[0], args[1])
        return dump(buyer)

    # --- query handlers ---

    async def get_account(self, args: list[str]) -> dict | None:
        # 0  username
        expect_args(args, 1)
        try:
            account = await self.ledger.accounts.get(args[0])
        except NotFound:
            return None
        return dump(account)

    async def get_assets(self, args: list[str]) -> list[dict]:
        # 0  for-sale only, 1  owner username (optional)
        expect_args(args, 1, 2)
        asset_filter = AssetFilter(
            for_sale_only=parse_bool(args[0]),
            owner_username=args[1] if len(args) == 2 else None,
        )
        return [dump(asset) async for asset in self.ledger.assets.list(asset_filter)]
