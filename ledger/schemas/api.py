"""Pydantic schemas for the HTTP API."""

from typing import Any

from pydantic import BaseModel, Field

from ledger.schemas.records import Asset


class AccountCreate(BaseModel):
    """Request schema for creating an account."""

    username: str = Field(..., min_length=1, max_length=255, description="Unique username")
    balance: int = Field(default=0, ge=0, description="Initial balance")


class AssetCreate(BaseModel):
    """Request schema for creating an asset owned by the path account."""

    id: str = Field(..., min_length=1, max_length=255, description="Unique asset ID")
    name: str = Field(default="", max_length=255, description="Descriptive name")


class SellRequest(BaseModel):
    """Request schema for listing an asset for sale."""

    seller: str = Field(..., min_length=1, description="Username listing the asset")
    price: int = Field(..., description="Listing price, must be positive")


class BuyRequest(BaseModel):
    """Request schema for buying a listed asset."""

    buyer: str = Field(..., min_length=1, description="Username paying for the asset")


class AssetListResponse(BaseModel):
    """Response for listing assets."""

    assets: list[Asset] = Field(default_factory=list)


class OperationRequest(BaseModel):
    """A named ledger operation with positional string arguments."""

    function: str = Field(..., min_length=1)
    args: list[str] = Field(default_factory=list)


class OperationResponse(BaseModel):
    """Result of a named ledger operation."""

    result: Any = None
