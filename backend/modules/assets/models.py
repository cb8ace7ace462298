"""
modules/assets/models.py — ORM models for the assets domain.

Owns tables: assets
"""

from sqlalchemy import Column, Integer, String, DateTime, Text
from sqlalchemy.sql import func

from core.base import Base, AssetStatus


class Asset(Base):
    """A piece of equipment that maintenance schedules target."""
    __tablename__ = "assets"

    id = Column(Integer, primary_key=True)
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=False, default="")
    location = Column(String(200), nullable=False, default="")
    status = Column(String(30), nullable=False, default=AssetStatus.OPERATIONAL.value)
    last_maintenance = Column(DateTime, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
