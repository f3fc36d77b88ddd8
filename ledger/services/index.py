"""Index maintenance - ordered identifier lists stored under well-known keys.

The store has no scan primitive, so each record category keeps the list of
its identifiers in creation order. Callers serialize access to an index with
its lock (see ``locks.index_lock``); these functions do no locking.
"""

import logging
from typing import Awaitable, Callable

from ledger import codec
from ledger.store import KeyValueStore

logger = logging.getLogger(__name__)

ACCOUNTS_INDEX = "_accountsIndex"
ASSETS_INDEX = "_assetsIndex"


class IndexMaintainer:
    """Append/remove/read access to the identifier indices."""

    def __init__(self, store: KeyValueStore):
        self.store = store

    async def read(self, index_name: str) -> list[str]:
        """Current identifiers of an index, empty if never written."""
        return codec.decode_index(await self.store.get(index_name))

    async def append(self, index_name: str, record_id: str) -> None:
        """Append an identifier.

        Not idempotent: appending an identifier twice stores it twice.

        Raises:
            StoreError: If the index cannot be read or written
        """
        ids = await self.read(index_name)
        ids.append(record_id)
        await self.store.put(index_name, codec.encode_index(ids))
        logger.debug("Index appended", extra={"index": index_name, "id": record_id})

    async def remove(self, index_name: str, record_id: str) -> bool:
        """Remove the first occurrence of an identifier.

        Later duplicates are left in place. The index is rewritten even when
        the identifier is not present.

        Returns:
            True if an occurrence was removed
        """
        ids = await self.read(index_name)
        removed = False
        for i, value in enumerate(ids):
            if value == record_id:
                del ids[i]
                removed = True
                break
        await self.store.put(index_name, codec.encode_index(ids))
        logger.debug(
            "Index entry removed" if removed else "Index entry not found",
            extra={"index": index_name, "id": record_id},
        )
        return removed

    async def reconcile(
        self,
        index_name: str,
        resolves: Callable[[str], Awaitable[bool]],
    ) -> list[str]:
        """Drop entries that do not resolve to a record, and duplicate entries.

        Args:
            index_name: Index to repair
            resolves: Async predicate telling whether an identifier has a record

        Returns:
            The identifiers removed, one item per removed entry
        """
        seen: set[str] = set()
        doomed: list[str] = []
        for record_id in await self.read(index_name):
            if record_id in seen or not await resolves(record_id):
                doomed.append(record_id)
            seen.add(record_id)

        for record_id in doomed:
            await self.remove(index_name, record_id)

        if doomed:
            logger.warning(
                "Index reconciled",
                extra={"index": index_name, "removed": doomed},
            )
        return doomed
