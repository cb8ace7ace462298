"""
assets/services.py — AssetStatusService

Implements the AssetStatusProvider ABC so the maintenance module can read and
set asset status through the registry instead of importing asset routes.
"""

from typing import Optional

from core.interfaces.asset_status import AssetStatusProvider
from modules.assets.models import Asset


class AssetStatusService(AssetStatusProvider):
    """Concrete AssetStatusProvider backed by the assets table."""

    def get_asset_status(self, db, asset_id: int) -> Optional[str]:
        asset = db.query(Asset).filter(Asset.id == asset_id).first()
        return asset.status if asset else None

    def set_asset_status(self, db, asset_id: int, status: str) -> None:
        asset = db.query(Asset).filter(Asset.id == asset_id).first()
        if asset is None:
            return
        asset.status = status
        db.commit()
