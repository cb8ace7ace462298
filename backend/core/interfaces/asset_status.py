# core/interfaces/asset_status.py
from abc import ABC, abstractmethod
from typing import Optional


class AssetStatusProvider(ABC):
    """What the maintenance module needs from the assets module."""

    @abstractmethod
    def get_asset_status(self, db, asset_id: int) -> Optional[str]:
        """Returns the asset's status value, or None if the asset does not exist."""
        ...

    @abstractmethod
    def set_asset_status(self, db, asset_id: int, status: str) -> None:
        """Persist a new status for the asset."""
        ...
