"""Asset routes — list, create, read, update, and delete maintainable assets."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from core.base import Base
from core.db import get_db
from modules.assets.models import Asset
from modules.assets.schemas import AssetCreate, AssetUpdate, AssetResponse

log = logging.getLogger("upkeep.api")
router = APIRouter(tags=["Assets"])


@router.get("/assets", response_model=list[AssetResponse])
def list_assets(db: Session = Depends(get_db)):
    """List all assets by name."""
    return db.query(Asset).order_by(Asset.name).all()


@router.post("/assets", response_model=AssetResponse, status_code=status.HTTP_201_CREATED)
def create_asset(data: AssetCreate, db: Session = Depends(get_db)):
    """Create a new asset."""
    asset = Asset(
        name=data.name,
        description=data.description,
        location=data.location,
        status=data.status.value,
    )
    db.add(asset)
    db.commit()
    db.refresh(asset)
    log.info(f"Asset {asset.id} created: {asset.name!r}")
    return asset


@router.get("/assets/{asset_id}", response_model=AssetResponse)
def get_asset(asset_id: int, db: Session = Depends(get_db)):
    asset = db.query(Asset).filter(Asset.id == asset_id).first()
    if not asset:
        raise HTTPException(status_code=404, detail="Asset not found")
    return asset


@router.patch("/assets/{asset_id}", response_model=AssetResponse)
def update_asset(asset_id: int, data: AssetUpdate, db: Session = Depends(get_db)):
    """Update an asset's details or status."""
    asset = db.query(Asset).filter(Asset.id == asset_id).first()
    if not asset:
        raise HTTPException(status_code=404, detail="Asset not found")
    for field, value in data.model_dump(exclude_unset=True).items():
        if field == "status" and value is not None:
            value = value.value
        setattr(asset, field, value)
    db.commit()
    db.refresh(asset)
    return asset


def _count_references(db: Session, asset_id: int) -> int:
    """Rows in any table holding a foreign key to this asset."""
    total = 0
    for table in Base.metadata.sorted_tables:
        for fk in table.foreign_keys:
            if fk.column.table is Asset.__table__:
                total += db.execute(
                    select(func.count()).select_from(table).where(fk.parent == asset_id)
                ).scalar_one()
    return total


@router.delete("/assets/{asset_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_asset(asset_id: int, db: Session = Depends(get_db)):
    """Delete an asset. Refused while maintenance schedules still point at it."""
    asset = db.query(Asset).filter(Asset.id == asset_id).first()
    if not asset:
        raise HTTPException(status_code=404, detail="Asset not found")
    if _count_references(db, asset_id):
        raise HTTPException(status_code=409, detail="Asset still has maintenance schedules")

    db.delete(asset)
    db.commit()
    log.info(f"Asset {asset_id} deleted")
