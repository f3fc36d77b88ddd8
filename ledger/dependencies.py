"""FastAPI dependencies for the process-wide ledger."""

from ledger.config import settings
from ledger.database import AsyncSessionLocal
from ledger.services.dispatch import Dispatcher
from ledger.services.ledger import Ledger
from ledger.store import SqlStateStore

# One Ledger per process: its locks guard the shared state store
_ledger = Ledger.from_settings(
    SqlStateStore(AsyncSessionLocal, timeout=settings.store_timeout),
    settings,
)


def get_ledger() -> Ledger:
    """Dependency that provides the process ledger.

    Usage in FastAPI:
        @app.get("/example")
        async def example(ledger: Ledger = Depends(get_ledger)):
            ...
    """
    return _ledger


def get_dispatcher() -> Dispatcher:
    """Dependency that provides an operation dispatcher over the process ledger."""
    return Dispatcher(_ledger)
