"""Maintenance completion routes."""

from typing import Optional

from fastapi import APIRouter, Depends, status

from modules.maintenance.routes._helpers import get_service
from modules.maintenance.schemas import CompletionCreate, CompletionResponse
from modules.maintenance.services import ScheduleService

router = APIRouter(tags=["Maintenance"])


@router.get("/maintenance/completions", response_model=list[CompletionResponse])
def list_completions(
    schedule_id: Optional[int] = None,
    service: ScheduleService = Depends(get_service),
):
    """List completions, optionally for one schedule."""
    return service.list_completions(schedule_id)


@router.post("/maintenance/completions", response_model=CompletionResponse, status_code=status.HTTP_201_CREATED)
def create_completion(data: CompletionCreate, service: ScheduleService = Depends(get_service)):
    """Mark the occurrence due on completed_date as done."""
    return service.complete_schedule(data.schedule_id, data.completed_date, data.notes)
