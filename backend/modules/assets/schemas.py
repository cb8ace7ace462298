"""
modules/assets/schemas.py — Pydantic schemas for the assets domain.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, ConfigDict

from core.base import AssetStatus


class AssetBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: str = ""
    location: str = ""
    status: AssetStatus = AssetStatus.OPERATIONAL


class AssetCreate(AssetBase):
    pass


class AssetUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    location: Optional[str] = None
    status: Optional[AssetStatus] = None
    last_maintenance: Optional[datetime] = None


class AssetResponse(AssetBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    last_maintenance: Optional[datetime] = None
    created_at: Optional[datetime] = None
