"""
core/base.py — Declarative Base and shared enums.

All ORM models import Base from here.
All shared enums (used across multiple domain modules) live here
to avoid circular imports between domain modules.
"""

from enum import Enum
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class MaintenanceFrequency(str, Enum):
    """How often a maintenance schedule recurs."""
    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"
    QUARTERLY = "QUARTERLY"
    BIANNUAL = "BIANNUAL"
    YEARLY = "YEARLY"
    TWO_YEAR = "TWO_YEAR"

    @classmethod
    def coerce(cls, value) -> 'MaintenanceFrequency':
        """Accept a member or its string value (case-insensitive).

        Raises ValueError for anything that is not a known frequency.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            return cls(value.strip().upper())
        raise ValueError(f"{value!r} is not a valid frequency")


class MaintenanceStatus(str, Enum):
    SCHEDULED = "SCHEDULED"
    IN_PROGRESS = "IN_PROGRESS"
    WAITING_ON_PARTS = "WAITING_ON_PARTS"
    COMPLETED = "COMPLETED"
    OVERDUE = "OVERDUE"


class ChangeType(str, Enum):
    """Kind of mutation recorded in the maintenance change log."""
    CREATE = "CREATE"
    EDIT = "EDIT"
    DELETE = "DELETE"


class AssetStatus(str, Enum):
    OPERATIONAL = "OPERATIONAL"
    MAINTENANCE = "MAINTENANCE"   # Taken out of service for upkeep
    OFFLINE = "OFFLINE"
    DECOMMISSIONED = "DECOMMISSIONED"
