"""Account endpoints."""

from fastapi import APIRouter, Depends, status

from ledger.dependencies import get_ledger
from ledger.schemas.api import AccountCreate, AssetCreate
from ledger.schemas.records import Account, Asset, AssetSpec
from ledger.services.ledger import Ledger

router = APIRouter()


@router.post(
    "/accounts",
    response_model=Account,
    status_code=status.HTTP_201_CREATED,
    summary="Create an account",
)
async def create_account(
    data: AccountCreate,
    ledger: Ledger = Depends(get_ledger),
) -> Account:
    """Register a new account.

    - **username**: Unique username
    - **balance**: Initial balance (default: 0)
    """
    return await ledger.accounts.create(data.username, data.balance)


@router.get(
    "/accounts",
    response_model=list[Account],
    summary="List all accounts",
)
async def list_accounts(
    ledger: Ledger = Depends(get_ledger),
) -> list[Account]:
    """Get all accounts in creation order."""
    return await ledger.accounts.list().to_list()


@router.get(
    "/accounts/{username}",
    response_model=Account,
    summary="Get an account",
)
async def get_account(
    username: str,
    ledger: Ledger = Depends(get_ledger),
) -> Account:
    return await ledger.accounts.get(username)


@router.post(
    "/accounts/{username}/assets",
    response_model=Asset,
    status_code=status.HTTP_201_CREATED,
    summary="Create an asset",
)
async def create_asset(
    username: str,
    data: AssetCreate,
    ledger: Ledger = Depends(get_ledger),
) -> Asset:
    """Create an asset owned by the path account.

    The asset starts unlisted at price 0.
    """
    return await ledger.assets.create(username, AssetSpec(id=data.id, name=data.name))
