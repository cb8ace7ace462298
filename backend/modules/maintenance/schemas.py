"""
modules/maintenance/schemas.py — Pydantic schemas for the maintenance domain.
"""

from datetime import date, datetime
from typing import Optional
from pydantic import BaseModel, Field, ConfigDict, field_validator, model_validator

from core.base import MaintenanceFrequency, MaintenanceStatus
from core.errors import ValidationError
from modules.maintenance.projector import as_day


def _coerce_day(v):
    """Accept dates, datetimes and ISO strings; keep only the calendar day."""
    if v is None or v == "":
        return None
    try:
        return as_day(v)
    except ValidationError as e:
        raise ValueError(e.message) from None


# ============== Schedule Schemas ==============

class ScheduleFields(BaseModel):
    """Input normalization shared by create and partial update."""

    @field_validator('frequency', mode='before', check_fields=False)
    @classmethod
    def normalize_frequency(cls, v):
        """Frequencies arrive in any case from forms and CSV imports."""
        if isinstance(v, str):
            return v.strip().upper()
        return v

    @field_validator('start_date', 'end_date', mode='before', check_fields=False)
    @classmethod
    def coerce_dates(cls, v):
        """Timestamps from older clients are cut down to their calendar day."""
        return _coerce_day(v)

    @field_validator('title', mode='before', check_fields=False)
    @classmethod
    def strip_title(cls, v):
        return v.strip() if isinstance(v, str) else v


class ScheduleBase(ScheduleFields):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = ""
    asset_id: int
    frequency: MaintenanceFrequency
    start_date: date
    end_date: Optional[date] = None
    status: MaintenanceStatus = MaintenanceStatus.SCHEDULED
    affects_asset_status: bool = False

    @model_validator(mode='after')
    def check_date_order(self):
        if self.end_date is not None and self.start_date > self.end_date:
            raise ValueError('end_date must be on or after start_date')
        return self


class ScheduleCreate(ScheduleBase):
    pass


class ScheduleUpdate(ScheduleFields):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    asset_id: Optional[int] = None
    frequency: Optional[MaintenanceFrequency] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    status: Optional[MaintenanceStatus] = None
    affects_asset_status: Optional[bool] = None


class ScheduleResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: str = ""
    asset_id: int
    frequency: str
    start_date: date
    end_date: Optional[date] = None
    status: str
    affects_asset_status: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ScheduleSummary(BaseModel):
    """Last completion and next due occurrence for one schedule."""
    schedule_id: int
    last_completed: Optional[date] = None
    next_due: Optional[date] = None
    overdue_count: int = 0
    is_overdue: bool = False


# ============== Completion Schemas ==============

class CompletionCreate(BaseModel):
    schedule_id: int
    completed_date: date
    notes: Optional[str] = None

    @field_validator('completed_date', mode='before')
    @classmethod
    def coerce_completed_date(cls, v):
        """The UI posts the full "now" timestamp; only the day is matched."""
        return _coerce_day(v)


class CompletionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    schedule_id: int
    completed_date: date
    notes: Optional[str] = None


# ============== Change Log Schemas ==============

class ChangeLogResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    schedule_id: int
    changed_by: Optional[str] = None
    change_type: str
    field_name: Optional[str] = None
    old_value: Optional[str] = None
    new_value: Optional[str] = None
    changed_at: datetime


# ============== Projection Schemas ==============

class OccurrenceResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    schedule_id: int
    nominal_date: date
    display_date: date
    is_overdue: bool
    days_overdue: int


class MaintenanceTask(OccurrenceResponse):
    """Occurrence enriched with its schedule for dashboard/agenda lists."""
    title: str
    asset_id: int
    asset_name: Optional[str] = None
    frequency: str
    status: str
