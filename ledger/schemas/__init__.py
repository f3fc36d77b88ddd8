"""Pydantic schemas for persisted records and API request/response validation."""

from ledger.schemas.api import (
    AccountCreate,
    AssetCreate,
    AssetListResponse,
    BuyRequest,
    OperationRequest,
    OperationResponse,
    SellRequest,
)
from ledger.schemas.records import Account, Asset, AssetSpec, TradeIntent, TradeStatus

__all__ = [
    # Records
    "Account",
    "Asset",
    "AssetSpec",
    "TradeIntent",
    "TradeStatus",
    # API schemas
    "AccountCreate",
    "AssetCreate",
    "AssetListResponse",
    "BuyRequest",
    "SellRequest",
    "OperationRequest",
    "OperationResponse",
]
