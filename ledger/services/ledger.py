"""Ledger facade - wires store, locks, registries and trading engine."""

import logging

from ledger.config import Settings
from ledger.services.accounts import AccountRegistry
from ledger.services.assets import AssetRegistry
from ledger.services.index import IndexMaintainer
from ledger.services.locks import LockRegistry
from ledger.services.trading import TradingEngine
from ledger.store import KeyValueStore

logger = logging.getLogger(__name__)


class Ledger:
    """All services of one ledger process over one state store.

    Locks are per Ledger instance, so a store must be served by exactly one
    Ledger at a time.
    """

    def __init__(
        self,
        store: KeyValueStore,
        require_owner_on_sell: bool = True,
        trade_journal: bool = True,
    ):
        self.store = store
        self.locks = LockRegistry()
        self.indexes = IndexMaintainer(store)
        self.accounts = AccountRegistry(store, self.indexes, self.locks)
        self.assets = AssetRegistry(store, self.indexes, self.locks)
        self.trading = TradingEngine(
            store,
            self.accounts,
            self.assets,
            self.locks,
            require_owner_on_sell=require_owner_on_sell,
            journal=trade_journal,
        )

    @classmethod
    def from_settings(cls, store: KeyValueStore, settings: Settings) -> "Ledger":
        return cls(
            store,
            require_owner_on_sell=settings.require_owner_on_sell,
            trade_journal=settings.trade_journal,
        )

    async def startup(self) -> None:
        """Finish any trade interrupted by a previous process."""
        intent = await self.trading.recover()
        if intent is not None:
            logger.info("Recovered pending trade", extra={"asset_id": intent.asset_id})

    async def reconcile(self) -> dict[str, list[str]]:
        """Repair both indices.

        Returns:
            Index name -> identifiers removed from it
        """
        return {
            self.accounts.index_name: await self.accounts.reconcile(),
            self.assets.index_name: await self.assets.reconcile(),
        }
