"""Shared create/lookup/enumerate logic for indexed record categories."""

import logging
from typing import AsyncIterator, Callable, Generic, TypeVar

from pydantic import BaseModel

from ledger import codec, telemetry
from ledger.exceptions import AlreadyExists, InconsistentState, NotFound, StoreError, ValidationError
from ledger.services.index import IndexMaintainer
from ledger.services.locks import KEYSPACE_LOCK, LockRegistry, index_lock
from ledger.store import KeyValueStore

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", bound=BaseModel)


def validate_key(record_id: str, label: str) -> None:
    """Reject identifiers that cannot be record keys.

    Keys starting with an underscore are reserved for ledger bookkeeping
    (indices, trade journal).

    Raises:
        ValidationError: If the identifier is empty or reserved
    """
    if not record_id:
        raise ValidationError(f"{label} must not be empty")
    if record_id.startswith("_"):
        raise ValidationError(f"{label} '{record_id}' is reserved (leading underscore)")


class RecordRegistry(Generic[RecordT]):
    """A record category stored one record per key plus an identifier index."""

    model: type[RecordT]
    index_name: str
    label: str

    def __init__(self, store: KeyValueStore, indexes: IndexMaintainer, locks: LockRegistry):
        self.store = store
        self.indexes = indexes
        self.locks = locks

    def key_of(self, record: RecordT) -> str:
        raise NotImplementedError

    async def get(self, record_id: str) -> RecordT:
        """Read a record.

        Raises:
            NotFound: If no record of this category exists at record_id
            StoreError: If the store read fails
        """
        data = await self.store.get(record_id)
        if data is None:
            raise NotFound(f"{self.label} '{record_id}' not found")
        if not codec.is_record(self.model, data):
            # Accounts and assets share one keyspace
            raise NotFound(f"{self.label} '{record_id}' not found (key holds another record type)")
        return codec.decode(self.model, data)

    async def exists(self, record_id: str) -> bool:
        """Check whether a record of this category resolves at record_id."""
        data = await self.store.get(record_id)
        return data is not None and codec.is_record(self.model, data)

    async def _create(self, record: RecordT) -> RecordT:
        """Index and write a new record.

        The identifier is appended to the index before the record is
        written. If the record write then fails, the index holds a dangling
        entry; that is logged as a partial commit, and the next create of the
        same identifier finishes the write without indexing it twice.
        """
        record_id = self.key_of(record)
        validate_key(record_id, self.label)

        async with self.locks.hold(KEYSPACE_LOCK, index_lock(self.index_name)):
            if await self.store.get(record_id) is not None:
                raise AlreadyExists(f"{self.label} '{record_id}' already exists")

            if record_id in await self.indexes.read(self.index_name):
                logger.warning(
                    "Completing partially committed create",
                    extra={"index": self.index_name, "id": record_id},
                )
            else:
                await self.indexes.append(self.index_name, record_id)

            try:
                await self.store.put(record_id, codec.encode(record))
            except StoreError:
                telemetry.record_partial_commit(self.index_name)
                logger.error(
                    "Partial commit: indexed but record not written",
                    extra={"index": self.index_name, "id": record_id},
                )
                raise

        return record

    async def _resolve(self, record_id: str) -> RecordT:
        """Resolve an index entry, raising InconsistentState if it dangles."""
        data = await self.store.get(record_id)
        if data is None or not codec.is_record(self.model, data):
            raise InconsistentState(
                f"{self.index_name} entry '{record_id}' does not resolve to a {self.label}"
            )
        return codec.decode(self.model, data)

    async def _scan(self, include: Callable[[RecordT], bool]) -> AsyncIterator[RecordT]:
        """Yield indexed records in creation order, skipping dangling entries."""
        for record_id in await self.indexes.read(self.index_name):
            try:
                record = await self._resolve(record_id)
            except InconsistentState as e:
                telemetry.record_inconsistent_entry(self.index_name)
                logger.warning(str(e), extra={"index": self.index_name, "id": record_id})
                continue
            if include(record):
                yield record

    async def reconcile(self) -> list[str]:
        """Remove dangling and duplicate entries from this category's index."""
        async with self.locks.hold(index_lock(self.index_name)):
            return await self.indexes.reconcile(self.index_name, self.exists)


class RecordQuery(Generic[RecordT]):
    """Lazy, restartable sequence of records.

    Each ``async for`` re-reads the index, so iterating twice observes
    records created in between.
    """

    def __init__(self, registry: RecordRegistry[RecordT], include: Callable[[RecordT], bool]):
        self.registry = registry
        self.include = include

    def __aiter__(self) -> AsyncIterator[RecordT]:
        return self.registry._scan(self.include)

    async def to_list(self) -> list[RecordT]:
        """Collect the whole sequence."""
        return [record async for record in self]
