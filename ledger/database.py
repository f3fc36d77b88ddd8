"""
Database configuration for the ledger state store.

Uses async SQLAlchemy with SQLite (local) or PostgreSQL (production).
"""

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from ledger.config import settings

# Create async engine
# echo=False by default, set SQLALCHEMY_ECHO=1 to enable SQL logging
engine = create_async_engine(settings.database_url, echo=settings.sqlalchemy_echo)

# Session factory - each store call opens its own session
AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""
    pass


async def init_db() -> None:
    """Create all database tables.

    Called on application startup to ensure tables exist.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
