"""Maintenance schedule routes — CRUD, projection, summary, change log, asset status."""

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, status

from core.dependencies import get_actor
from modules.maintenance.routes._helpers import get_service
from modules.maintenance.schemas import (
    ChangeLogResponse,
    CompletionResponse,
    OccurrenceResponse,
    ScheduleCreate,
    ScheduleResponse,
    ScheduleSummary,
    ScheduleUpdate,
)
from modules.maintenance.services import ScheduleService
from modules.maintenance.views import completion_history, schedule_summary

log = logging.getLogger("upkeep.api")
router = APIRouter(tags=["Maintenance"])


@router.get("/maintenance/schedules", response_model=list[ScheduleResponse])
def list_schedules(
    start: Optional[date] = None,
    end: Optional[date] = None,
    asset_id: Optional[int] = None,
    service: ScheduleService = Depends(get_service),
):
    """List schedules, optionally only those active between start and end."""
    return service.list_schedules(start=start, end=end, asset_id=asset_id)


@router.post("/maintenance/schedules", response_model=ScheduleResponse, status_code=status.HTTP_201_CREATED)
def create_schedule(
    data: ScheduleCreate,
    service: ScheduleService = Depends(get_service),
    actor: Optional[str] = Depends(get_actor),
):
    """Create a maintenance schedule."""
    return service.create_schedule(data, changed_by=actor)


@router.get("/maintenance/schedules/{schedule_id}", response_model=ScheduleResponse)
def get_schedule(schedule_id: int, service: ScheduleService = Depends(get_service)):
    return service.get_schedule(schedule_id)


@router.patch("/maintenance/schedules/{schedule_id}", response_model=ScheduleResponse)
def update_schedule(
    schedule_id: int,
    data: ScheduleUpdate,
    service: ScheduleService = Depends(get_service),
    actor: Optional[str] = Depends(get_actor),
):
    """Update a schedule. Only fields whose value changes are logged."""
    return service.update_schedule(schedule_id, data, changed_by=actor)


@router.delete("/maintenance/schedules/{schedule_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_schedule(
    schedule_id: int,
    service: ScheduleService = Depends(get_service),
    actor: Optional[str] = Depends(get_actor),
):
    """Delete a schedule with its completions and change log."""
    service.delete_schedule(schedule_id, changed_by=actor)


@router.get("/maintenance/schedules/{schedule_id}/occurrences", response_model=list[OccurrenceResponse])
def list_occurrences(
    schedule_id: int,
    horizon_end: Optional[date] = None,
    service: ScheduleService = Depends(get_service),
):
    """Outstanding occurrences of a schedule up to its end date or the horizon."""
    return service.occurrences(schedule_id, horizon_end=horizon_end)


@router.get("/maintenance/schedules/{schedule_id}/summary", response_model=ScheduleSummary)
def get_schedule_summary(schedule_id: int, service: ScheduleService = Depends(get_service)):
    """Last completed date, next due date and overdue count."""
    schedule = service.get_schedule(schedule_id)
    return schedule_summary(schedule, service.list_completions(schedule_id), clock=service.clock)


@router.get("/maintenance/schedules/{schedule_id}/completions", response_model=list[CompletionResponse])
def list_schedule_completions(schedule_id: int, service: ScheduleService = Depends(get_service)):
    """Completion history of a schedule, newest first."""
    return completion_history(schedule_id, service.list_completions(schedule_id))


@router.get("/maintenance/schedules/{schedule_id}/changes", response_model=list[ChangeLogResponse])
def list_schedule_changes(schedule_id: int, service: ScheduleService = Depends(get_service)):
    """Change log of a schedule, oldest first."""
    return service.list_changes(schedule_id)


@router.post("/maintenance/schedules/{schedule_id}/propagate-asset-status")
def propagate_asset_status(schedule_id: int, service: ScheduleService = Depends(get_service)):
    """Set the asset to MAINTENANCE if this schedule affects it and is overdue."""
    return service.propagate_asset_status(schedule_id)
