"""Maintenance CSV export."""

import csv
import io
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse

from core.rate_limit import limiter
from modules.maintenance.routes._helpers import asset_name_map, get_service
from modules.maintenance.services import ScheduleService
from modules.maintenance.views import schedule_summary
from core.errors import UnknownFrequencyError

log = logging.getLogger("upkeep.api")

router = APIRouter(tags=["Export"])


@router.get("/export/maintenance-schedules")
@limiter.limit("30/minute")
def export_schedules_csv(
    request: Request,
    asset_id: Optional[int] = None,
    service: ScheduleService = Depends(get_service),
):
    """Export schedules with their asset, last completion and next due date as CSV."""
    schedules = service.list_schedules(asset_id=asset_id)
    completions = service.list_completions()
    asset_names = asset_name_map(service.db)

    output = io.StringIO()
    writer = csv.writer(output)

    # Header
    writer.writerow([
        "ID", "Title", "Description", "Asset ID", "Asset Name", "Frequency",
        "Start Date", "End Date", "Status", "Affects Asset Status",
        "Last Completed", "Next Due", "Overdue Occurrences",
    ])

    # Data
    for schedule in schedules:
        try:
            summary = schedule_summary(schedule, completions, clock=service.clock)
        except UnknownFrequencyError:
            log.warning(f"Export: schedule {schedule.id} has unknown frequency {schedule.frequency!r}")
            summary = {"last_completed": None, "next_due": None, "overdue_count": ""}
        writer.writerow([
            schedule.id,
            schedule.title,
            schedule.description,
            schedule.asset_id,
            asset_names.get(schedule.asset_id, ""),
            schedule.frequency,
            schedule.start_date.isoformat() if schedule.start_date else "",
            schedule.end_date.isoformat() if schedule.end_date else "",
            schedule.status,
            "yes" if schedule.affects_asset_status else "no",
            summary["last_completed"].isoformat() if summary["last_completed"] else "",
            summary["next_due"].isoformat() if summary["next_due"] else "",
            summary["overdue_count"],
        ])

    output.seek(0)
    return StreamingResponse(
        iter([output.getvalue()]),
        media_type="text/csv",
        headers={"Content-Disposition": "attachment; filename=maintenance_schedules_export.csv"}
    )
