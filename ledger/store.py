"""Key-value state store.

The ledger core only needs ``get`` and ``put``, each atomic for a single
key. SqlStateStore runs every call in its own database transaction, so a
sequence of calls is never atomic as a group.
"""

import asyncio
import logging
from typing import Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ledger.exceptions import StoreError
from ledger.models import StateEntry

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    """Per-key atomic storage consumed by the ledger services."""

    async def get(self, key: str) -> bytes | None:
        ...

    async def put(self, key: str, value: bytes) -> None:
        ...


class SqlStateStore:
    """KeyValueStore backed by the ``state_entries`` table."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession], timeout: float = 5.0):
        self.session_factory = session_factory
        self.timeout = timeout

    async def get(self, key: str) -> bytes | None:
        """Read the value stored at key, or None if absent."""
        try:
            return await asyncio.wait_for(self._get(key), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.error("State read timed out", extra={"key": key})
            raise StoreError(f"Timed out reading '{key}'")
        except SQLAlchemyError as e:
            logger.error("State read failed", extra={"key": key, "error": str(e)})
            raise StoreError(f"Error fetching '{key}'") from e

    async def put(self, key: str, value: bytes) -> None:
        """Write value at key, creating or replacing it."""
        try:
            await asyncio.wait_for(self._put(key, value), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.error("State write timed out", extra={"key": key})
            raise StoreError(f"Timed out writing '{key}'")
        except SQLAlchemyError as e:
            logger.error("State write failed", extra={"key": key, "error": str(e)})
            raise StoreError(f"Error putting '{key}' on ledger") from e

    async def _get(self, key: str) -> bytes | None:
        async with self.session_factory() as session:
            entry = await session.get(StateEntry, key)
            return entry.value if entry is not None else None

    async def _put(self, key: str, value: bytes) -> None:
        async with self.session_factory() as session:
            async with session.begin():
                entry = await session.get(StateEntry, key)
                if entry is None:
                    session.add(StateEntry(key=key, value=value, version=1))
                else:
                    entry.value = value
                    entry.version += 1
