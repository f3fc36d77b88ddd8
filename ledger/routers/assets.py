"""Asset endpoints - listing, selling and buying."""

from fastapi import APIRouter, Depends, Query

from ledger.dependencies import get_ledger
from ledger.schemas.api import AssetListResponse, BuyRequest, SellRequest
from ledger.schemas.records import Account, Asset
from ledger.services.assets import AssetFilter
from ledger.services.ledger import Ledger

router = APIRouter()


@router.get(
    "/assets",
    response_model=AssetListResponse,
    summary="List assets",
)
async def list_assets(
    for_sale: bool = Query(default=False, description="Only assets listed for sale"),
    owner: str | None = Query(default=None, description="Only assets owned by this username"),
    ledger: Ledger = Depends(get_ledger),
) -> AssetListResponse:
    """Get assets in creation order, optionally filtered."""
    asset_filter = AssetFilter(for_sale_only=for_sale, owner_username=owner)
    return AssetListResponse(assets=await ledger.assets.list(asset_filter).to_list())


@router.get(
    "/assets/{asset_id}",
    response_model=Asset,
    summary="Get an asset",
)
async def get_asset(
    asset_id: str,
    ledger: Ledger = Depends(get_ledger),
) -> Asset:
    return await ledger.assets.get(asset_id)


@router.post(
    "/assets/{asset_id}/sell",
    response_model=Asset,
    summary="List an asset for sale",
)
async def sell_asset(
    asset_id: str,
    data: SellRequest,
    ledger: Ledger = Depends(get_ledger),
) -> Asset:
    """Put an asset on the market at a positive price.

    - **seller**: Username listing the asset (must be the owner unless disabled)
    - **price**: Listing price
    """
    return await ledger.trading.list(asset_id, data.price, seller=data.seller)


@router.post(
    "/assets/{asset_id}/buy",
    response_model=Account,
    summary="Buy a listed asset",
)
async def buy_asset(
    asset_id: str,
    data: BuyRequest,
    ledger: Ledger = Depends(get_ledger),
) -> Account:
    """Buy an asset at its listed price.

    Returns the buyer's account after the trade.
    """
    return await ledger.trading.buy(data.buyer, asset_id)
