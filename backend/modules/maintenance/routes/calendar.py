"""Dashboard, calendar, agenda and analytics views over projected occurrences."""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query

from modules.maintenance.routes._helpers import asset_name_map, get_service
from modules.maintenance.services import ScheduleService
from modules.maintenance import views

router = APIRouter(tags=["Maintenance"])


@router.get("/maintenance/dashboard")
def get_dashboard(
    tab: str = Query(default="today"),
    service: ScheduleService = Depends(get_service),
):
    """Today's and overdue maintenance tasks with counts."""
    return views.dashboard_tasks(
        service.list_schedules(),
        service.list_completions(),
        clock=service.clock,
        tab=tab,
        asset_names=asset_name_map(service.db),
    )


@router.get("/maintenance/calendar")
def get_calendar(
    start: date,
    end: date,
    service: ScheduleService = Depends(get_service),
):
    """Occurrences grouped by display day. Overdue items appear on today."""
    return views.calendar_events(
        service.list_schedules(),
        service.list_completions(),
        start,
        end,
        clock=service.clock,
        asset_names=asset_name_map(service.db),
    )


@router.get("/maintenance/agenda")
def get_agenda(
    limit: Optional[int] = Query(default=None, ge=1, le=200),
    service: ScheduleService = Depends(get_service),
):
    """Next upcoming occurrences across all active schedules."""
    return views.agenda(
        service.list_schedules(),
        service.list_completions(),
        clock=service.clock,
        limit=limit,
        asset_names=asset_name_map(service.db),
    )


@router.get("/maintenance/analytics/completions")
def get_completion_analytics(
    months: int = Query(default=6, ge=1, le=36),
    service: ScheduleService = Depends(get_service),
):
    """Completions per calendar month, oldest first."""
    return views.monthly_completion_counts(service.list_completions(), clock=service.clock, months=months)
