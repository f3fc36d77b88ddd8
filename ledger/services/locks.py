"""Named asyncio locks.

The state store only guarantees per-key atomicity, so every read-modify-write
sequence over several keys runs while holding the locks named after it.
"""

import asyncio
from collections import defaultdict
from contextlib import AsyncExitStack, asynccontextmanager
from typing import AsyncIterator

TRADING_LOCK = "trading"

# Accounts and assets share one keyspace, so creates in either category
# serialize on this lock as well as their own index lock.
KEYSPACE_LOCK = "keyspace"


def index_lock(index_name: str) -> str:
    """Lock name guarding an index and the creates that append to it."""
    return f"index:{index_name}"


class LockRegistry:
    """Lazily created named locks, always acquired in sorted order."""

    def __init__(self):
        self._locks: defaultdict[str, asyncio.Lock] = defaultdict(asyncio.Lock)

    @asynccontextmanager
    async def hold(self, *names: str) -> AsyncIterator[None]:
        """Hold every named lock for the duration of the block.

        Sorting the names gives all callers the same acquisition order, so
        two holders of overlapping lock sets cannot deadlock.
        """
        async with AsyncExitStack() as stack:
            for name in sorted(set(names)):
                await stack.enter_async_context(self._locks[name])
            yield
