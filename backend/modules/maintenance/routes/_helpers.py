"""Shared dependencies and lookups for maintenance routes."""

from fastapi import Depends
from sqlalchemy.orm import Session

from core.clock import get_clock
from core.db import get_db
from core.interfaces.clock import Clock
from modules.assets.models import Asset
from modules.maintenance.services import ScheduleService


def get_service(db: Session = Depends(get_db), clock: Clock = Depends(get_clock)) -> ScheduleService:
    """Per-request ScheduleService bound to the request's session and clock."""
    return ScheduleService(db, clock=clock)


def asset_name_map(db: Session) -> dict:
    """{asset_id: name} for labelling tasks."""
    return {asset_id: name for asset_id, name in db.query(Asset.id, Asset.name).all()}
