"""
Shared pytest fixtures for testing the asset ledger.

Each test gets a fresh SQLite database file, so separate store sessions
see each other's writes.
"""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from ledger.database import Base
from ledger.dependencies import get_dispatcher, get_ledger
from ledger.exceptions import StoreError
from ledger.main import app
from ledger.schemas.records import AssetSpec
from ledger.services.dispatch import Dispatcher
from ledger.services.ledger import Ledger
from ledger.store import SqlStateStore


class FlakyStore:
    """Store wrapper that fails chosen puts, for partial-commit tests."""

    def __init__(self, inner):
        self.inner = inner
        self.failing: dict[str, int] = {}
        self.puts: list[str] = []

    def fail_put(self, key: str, times: int = 1) -> None:
        """Make the next `times` puts of key raise StoreError."""
        self.failing[key] = times

    async def get(self, key: str) -> bytes | None:
        return await self.inner.get(key)

    async def put(self, key: str, value: bytes) -> None:
        if self.failing.get(key, 0) > 0:
            self.failing[key] -= 1
            raise StoreError(f"Injected failure writing '{key}'")
        self.puts.append(key)
        await self.inner.put(key, value)


@pytest.fixture(scope="session")
def anyio_backend():
    """Use asyncio backend for pytest-asyncio."""
    return "asyncio"


@pytest_asyncio.fixture
async def test_engine(tmp_path):
    """Create a test database engine on a fresh SQLite file."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'ledger.db'}", echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture
async def test_store(test_engine):
    """SqlStateStore over the test database."""
    session_factory = async_sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    return SqlStateStore(session_factory)


@pytest_asyncio.fixture
async def flaky_store(test_store):
    """Test store with failure injection (no failures until asked)."""
    return FlakyStore(test_store)


@pytest_asyncio.fixture
async def ledger(flaky_store):
    """Ledger with default settings over the flaky test store."""
    return Ledger(flaky_store)


@pytest_asyncio.fixture
async def test_client(ledger):
    """Provide a FastAPI test client bound to the test ledger."""
    app.dependency_overrides[get_ledger] = lambda: ledger
    app.dependency_overrides[get_dispatcher] = lambda: Dispatcher(ledger)

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as client:
        yield client

    app.dependency_overrides.clear()


# --- Helper fixtures for creating test data ---

@pytest_asyncio.fixture
async def alice(ledger):
    """Account alice with balance 100."""
    return await ledger.accounts.create("alice", 100)


@pytest_asyncio.fixture
async def bob(ledger):
    """Account bob with balance 100."""
    return await ledger.accounts.create("bob", 100)


@pytest_asyncio.fixture
async def sword(ledger, alice):
    """Asset sword owned by alice, not listed."""
    return await ledger.assets.create("alice", AssetSpec(id="sword", name="Sword"))


@pytest_asyncio.fixture
async def listed_sword(ledger, sword):
    """Sword listed by alice at 50."""
    return await ledger.trading.list("sword", 50, seller="alice")
