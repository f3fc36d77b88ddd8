"""Trading engine - listing and buying assets.

Per asset the state cycles Owned(owner) -> Listed(owner, price) ->
Owned(buyer) -> ... with no terminal state.

A buy rewrites three records (asset, buyer, seller) on a store that is only
atomic per key. Listings and buys therefore run under the global trading
lock, and by default a buy is staged in a write-ahead journal first:

1. ``_tradeJournal`` is written as PENDING with the post-trade image of all
   three records
2. the three records are written
3. ``_tradeJournal`` is marked COMMITTED

A failure in step 2 or 3 leaves a PENDING journal. ``recover()`` rewrites
the images and marks the journal COMMITTED; it runs at startup and before
every listing or buy, while the trading lock is held, so the journaled
records cannot have been changed by any other trade in between.
"""

import logging

from ledger import codec, telemetry
from ledger.exceptions import (
    InsufficientFunds,
    InvalidPrice,
    NotForSale,
    NotOwner,
    SelfTrade,
    StoreError,
)
from ledger.schemas.records import Account, Asset, TradeIntent, TradeStatus
from ledger.services.accounts import AccountRegistry
from ledger.services.assets import AssetRegistry
from ledger.services.locks import TRADING_LOCK, LockRegistry
from ledger.store import KeyValueStore

logger = logging.getLogger(__name__)

JOURNAL_KEY = "_tradeJournal"


class TradingEngine:
    """State machine for listing and buying assets."""

    def __init__(
        self,
        store: KeyValueStore,
        accounts: AccountRegistry,
        assets: AssetRegistry,
        locks: LockRegistry,
        require_owner_on_sell: bool = True,
        journal: bool = True,
    ):
        self.store = store
        self.accounts = accounts
        self.assets = assets
        self.locks = locks
        self.require_owner_on_sell = require_owner_on_sell
        self.journal = journal

    async def list(self, asset_id: str, price: int, seller: str | None = None) -> Asset:
        """List an asset for sale at price.

        Re-listing an already listed asset overwrites its price. Ownership is
        never changed here.

        Args:
            asset_id: Asset to list
            price: Positive listing price (0 is reserved for "not for sale")
            seller: Username requesting the listing; must be the owner when
                require_owner_on_sell is enabled, ignored otherwise

        Returns:
            The listed asset

        Raises:
            NotFound: If the asset does not exist
            InvalidPrice: If price is not positive
            NotOwner: If the seller does not own the asset (owner check enabled)
            StoreError: If a store call fails
        """
        async with self.locks.hold(TRADING_LOCK):
            await self._recover()

            asset = await self.assets.get(asset_id)

            if price <= 0:
                raise InvalidPrice(f"Invalid price {price}: must be a positive integer")

            if self.require_owner_on_sell and seller != asset.owner:
                raise NotOwner(f"Asset '{asset_id}' is not owned by '{seller}'")

            listed = asset.model_copy(update={"listed_price": price, "for_sale": True})
            await self.store.put(listed.id, codec.encode(listed))

        telemetry.record_listing(asset_id)
        logger.info(
            "Asset listed",
            extra={"asset_id": asset_id, "owner": asset.owner, "price": price},
        )
        return listed

    async def buy(self, buyer_username: str, asset_id: str) -> Account:
        """Buy a listed asset, moving funds and ownership in one trade.

        Preconditions are checked in this order, before any write: asset
        exists, asset is for sale, buyer exists, seller (current owner)
        exists, buyer is not the seller, buyer balance strictly exceeds the
        price. A buyer whose balance equals the price cannot buy.

        Returns:
            The buyer's account after the trade

        Raises:
            NotFound: If the asset, buyer or seller does not exist
            NotForSale: If the asset is not listed
            SelfTrade: If the buyer already owns the asset
            InsufficientFunds: If balance <= price
            StoreError: If a store call fails. When the journal is enabled
                and the trade was staged, it is completed by recover().
        """
        async with self.locks.hold(TRADING_LOCK):
            await self._recover()

            asset = await self.assets.get(asset_id)
            if not asset.for_sale:
                raise NotForSale(f"Asset '{asset_id}' is not for sale")

            buyer = await self.accounts.get(buyer_username)
            seller = await self.accounts.get(asset.owner)

            if buyer.username == seller.username:
                raise SelfTrade(f"Account '{buyer.username}' already owns asset '{asset_id}'")

            price = asset.listed_price
            if buyer.balance <= price:
                raise InsufficientFunds(
                    f"Not enough money: balance {buyer.balance} must exceed price {price}"
                )

            buyer_after = buyer.model_copy(update={"balance": buyer.balance - price})
            seller_after = seller.model_copy(update={"balance": seller.balance + price})
            asset_after = asset.model_copy(
                update={"owner": buyer.username, "listed_price": 0, "for_sale": False}
            )

            intent = TradeIntent(
                status=TradeStatus.PENDING,
                asset_id=asset.id,
                buyer=buyer.username,
                seller=seller.username,
                price=price,
                records={
                    asset.id: codec.encode(asset_after).decode(),
                    buyer.username: codec.encode(buyer_after).decode(),
                    seller.username: codec.encode(seller_after).decode(),
                },
            )

            if self.journal:
                await self.store.put(JOURNAL_KEY, codec.encode(intent))
                try:
                    await self._apply(intent)
                    await self._mark_committed(intent)
                except StoreError:
                    logger.error(
                        "Trade journaled but not committed, pending roll-forward",
                        extra={"asset_id": asset_id, "buyer": buyer.username},
                    )
                    raise
            else:
                await self._apply(intent)

        telemetry.record_trade(asset_id, price)
        logger.info(
            "Trade executed",
            extra={
                "asset_id": asset_id,
                "price": price,
                "buyer": buyer.username,
                "seller": seller.username,
            },
        )
        return buyer_after

    async def recover(self) -> TradeIntent | None:
        """Roll forward a trade left pending by a failed buy.

        Returns:
            The intent that was completed, or None if nothing was pending
        """
        async with self.locks.hold(TRADING_LOCK):
            return await self._recover()

    async def pending(self) -> TradeIntent | None:
        """The journaled trade still waiting to be rolled forward, if any."""
        data = await self.store.get(JOURNAL_KEY)
        if data is None:
            return None
        intent = codec.decode(TradeIntent, data)
        return intent if intent.status == TradeStatus.PENDING else None

    async def _recover(self) -> TradeIntent | None:
        intent = await self.pending()
        if intent is None:
            return None

        logger.warning(
            "Rolling forward pending trade",
            extra={"asset_id": intent.asset_id, "buyer": intent.buyer, "seller": intent.seller},
        )
        await self._apply(intent)
        await self._mark_committed(intent)
        return intent

    async def _apply(self, intent: TradeIntent) -> None:
        """Write every post-trade record image of the intent."""
        written: list[str] = []
        try:
            for key, record in intent.records.items():
                await self.store.put(key, record.encode())
                written.append(key)
        except StoreError:
            if written:
                telemetry.record_partial_commit("trade")
                logger.error(
                    "Partial commit: trade interrupted mid-write"
                    + (", pending in journal" if self.journal else ", not journaled"),
                    extra={"asset_id": intent.asset_id, "written": written},
                )
            raise

    async def _mark_committed(self, intent: TradeIntent) -> None:
        committed = intent.model_copy(update={"status": TradeStatus.COMMITTED})
        await self.store.put(JOURNAL_KEY, codec.encode(committed))
