"""Ledger records as persisted in the state store.

Field aliases are the persisted JSON field names and must not change.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Account(BaseModel):
    """A holder of a non-negative currency balance."""

    model_config = ConfigDict(populate_by_name=True)

    username: str = Field(..., min_length=1)
    balance: int = Field(..., ge=0)


class Asset(BaseModel):
    """A tradeable record owned by exactly one account."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., min_length=1)
    name: str = ""
    owner: str = ""
    listed_price: int = Field(default=0, ge=0, alias="listedPrice")
    for_sale: bool = Field(default=False, alias="forSale")


class AssetSpec(BaseModel):
    """Caller-supplied part of a new asset.

    Any owner, price or for-sale fields sent by the caller are dropped;
    those are always assigned by the registry.
    """

    model_config = ConfigDict(extra="ignore")

    id: str = Field(..., min_length=1)
    name: str = ""


class TradeStatus(str, Enum):
    """Lifecycle of a journaled trade."""

    PENDING = "pending"
    COMMITTED = "committed"


class TradeIntent(BaseModel):
    """Write-ahead record of a buy: the post-trade image of every record it touches."""

    model_config = ConfigDict(populate_by_name=True)

    status: TradeStatus
    asset_id: str = Field(..., alias="assetId")
    buyer: str
    seller: str
    price: int
    # store key -> post-trade record JSON
    records: dict[str, str]
