"""Asset registry - creation and filtered enumeration of assets."""

import logging
from dataclasses import dataclass

from ledger import telemetry
from ledger.schemas.records import Asset, AssetSpec
from ledger.services.index import ASSETS_INDEX
from ledger.services.registry import RecordQuery, RecordRegistry, validate_key

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AssetFilter:
    """Fixed filters supported when listing assets."""

    for_sale_only: bool = False
    owner_username: str | None = None

    def matches(self, asset: Asset) -> bool:
        if self.owner_username is not None and asset.owner != self.owner_username:
            return False
        if self.for_sale_only and not asset.for_sale:
            return False
        return True


class AssetRegistry(RecordRegistry[Asset]):
    """Assets keyed by id, enumerated through ``_assetsIndex``."""

    model = Asset
    index_name = ASSETS_INDEX
    label = "Asset"

    def key_of(self, record: Asset) -> str:
        return record.id

    async def create(self, owner: str, spec: AssetSpec) -> Asset:
        """Create a new asset owned by the caller.

        Ownership and listing state are always assigned here: the asset
        starts owned by ``owner``, unlisted, at price 0.

        Raises:
            ValidationError: If the id is empty or reserved
            AlreadyExists: If a record already exists at the id
            StoreError: If the index or record write fails
        """
        validate_key(spec.id, self.label)
        asset = Asset(id=spec.id, name=spec.name, owner=owner, listed_price=0, for_sale=False)
        await self._create(asset)

        telemetry.record_asset_created()
        logger.info(
            "Asset created",
            extra={"asset_id": asset.id, "owner": owner},
        )
        return asset

    def list(self, asset_filter: AssetFilter | None = None) -> RecordQuery[Asset]:
        """Assets matching the filter, in creation order."""
        asset_filter = asset_filter or AssetFilter()
        return RecordQuery(self, asset_filter.matches)
