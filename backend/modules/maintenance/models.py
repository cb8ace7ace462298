"""
modules/maintenance/models.py — ORM models for the maintenance domain.

Owns tables: maintenance_schedules, maintenance_completions, maintenance_change_logs
"""

from sqlalchemy import (
    Column, Integer, String, Date, DateTime, Boolean,
    ForeignKey, Text
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from core.base import Base, MaintenanceStatus


class MaintenanceSchedule(Base):
    """Recurring maintenance rule for an asset."""
    __tablename__ = "maintenance_schedules"

    id = Column(Integer, primary_key=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False, default="")
    asset_id = Column(Integer, ForeignKey("assets.id"), nullable=False, index=True)
    frequency = Column(String(20), nullable=False)       # MaintenanceFrequency value
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=True)               # null = open-ended
    status = Column(String(30), nullable=False, default=MaintenanceStatus.SCHEDULED.value)
    affects_asset_status = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    asset = relationship("Asset")


class MaintenanceCompletion(Base):
    """Record that the occurrence due on ``completed_date`` was carried out."""
    __tablename__ = "maintenance_completions"

    id = Column(Integer, primary_key=True)
    schedule_id = Column(Integer, ForeignKey("maintenance_schedules.id"), nullable=False, index=True)
    completed_date = Column(Date, nullable=False)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, server_default=func.now())


class MaintenanceChangeLog(Base):
    """Append-only audit row for a schedule definition mutation."""
    __tablename__ = "maintenance_change_logs"

    id = Column(Integer, primary_key=True)
    schedule_id = Column(Integer, ForeignKey("maintenance_schedules.id"), nullable=False, index=True)
    changed_by = Column(String(100), nullable=True)      # null = system
    change_type = Column(String(10), nullable=False)     # ChangeType value
    field_name = Column(String(50), nullable=True)       # EDIT rows only
    old_value = Column(Text, nullable=True)
    new_value = Column(Text, nullable=True)
    changed_at = Column(DateTime, nullable=False, server_default=func.now())
