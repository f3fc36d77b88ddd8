"""API routers."""

from ledger.routers.accounts import router as accounts_router
from ledger.routers.assets import router as assets_router
from ledger.routers.operations import router as operations_router

__all__ = ["accounts_router", "assets_router", "operations_router"]
