"""
modules/maintenance/views.py — Presentation-facing slices of the projection.

Dashboard, calendar, agenda, summary and analytics all read the same
projector output and only filter, group or count it.
"""

from collections import Counter
from datetime import date
from itertools import islice, takewhile
from typing import Iterable, Optional

from dateutil.relativedelta import relativedelta

from core.base import MaintenanceStatus
from core.clock import get_clock
from core.config import settings
from core.errors import ValidationError
from core.interfaces.clock import Clock
from modules.maintenance.projector import (
    Occurrence,
    as_day,
    field_of,
    project,
    project_many,
)

DASHBOARD_TABS = ("today", "overdue", "all")


def _active(schedules: Iterable) -> list:
    """Schedules that still generate work (anything not COMPLETED)."""
    return [s for s in schedules if field_of(s, "status") != MaintenanceStatus.COMPLETED.value]


def task_dict(occurrence: Occurrence, schedule, asset_names: Optional[dict] = None) -> dict:
    """Occurrence plus the schedule fields lists need to render it."""
    asset_id = field_of(schedule, "asset_id")
    task = occurrence.to_dict()
    task.update({
        "title": field_of(schedule, "title"),
        "asset_id": asset_id,
        "asset_name": (asset_names or {}).get(asset_id),
        "frequency": field_of(schedule, "frequency"),
        "status": field_of(schedule, "status"),
    })
    return task


def dashboard_tasks(
    schedules: Iterable,
    completions: Iterable,
    clock: Optional[Clock] = None,
    tab: str = "today",
    asset_names: Optional[dict] = None,
) -> dict:
    """Due and overdue work as of today.

    tab="today" keeps today's and overdue tasks, "overdue" only overdue ones,
    "all" everything due up to today. Overdue tasks sort first, then by date.
    """
    if tab not in DASHBOARD_TABS:
        raise ValidationError.for_field("tab", f"tab must be one of {', '.join(DASHBOARD_TABS)}")
    clock = clock or get_clock()
    today = clock.today()

    by_id = {field_of(s, "id"): s for s in _active(schedules)}
    due = takewhile(
        lambda occ: occ.nominal_date <= today,
        project_many(by_id.values(), completions, horizon_end=today, clock=clock, skip_invalid=True),
    )
    occurrences = sorted(due, key=lambda occ: (not occ.is_overdue, occ.nominal_date, occ.schedule_id))

    overdue_count = sum(1 for occ in occurrences if occ.is_overdue)
    today_count = sum(1 for occ in occurrences if occ.nominal_date == today)

    if tab == "today":
        occurrences = [occ for occ in occurrences if occ.is_overdue or occ.nominal_date == today]
    elif tab == "overdue":
        occurrences = [occ for occ in occurrences if occ.is_overdue]

    return {
        "tab": tab,
        "today": today.isoformat(),
        "overdue_count": overdue_count,
        "today_count": today_count,
        "tasks": [task_dict(occ, by_id[occ.schedule_id], asset_names) for occ in occurrences],
    }


def calendar_events(
    schedules: Iterable,
    completions: Iterable,
    start,
    end,
    clock: Optional[Clock] = None,
    asset_names: Optional[dict] = None,
) -> list[dict]:
    """Occurrences grouped by the day they are displayed on, within [start, end].

    Overdue occurrences show on today's cell, so a window that contains
    today collects every outstanding overdue item there.
    """
    start, end = as_day(start), as_day(end)
    if start is None or end is None:
        raise ValidationError.for_field("start", "start and end are required")
    if start > end:
        raise ValidationError.for_field("end", "end must be on or after start")
    clock = clock or get_clock()

    by_id = {field_of(s, "id"): s for s in _active(schedules)}
    days: dict[date, list] = {}
    for occ in takewhile(
        lambda o: o.nominal_date <= end,
        project_many(by_id.values(), completions, horizon_end=end, clock=clock, skip_invalid=True),
    ):
        if start <= occ.display_date <= end:
            days.setdefault(occ.display_date, []).append(task_dict(occ, by_id[occ.schedule_id], asset_names))

    return [{"date": day.isoformat(), "tasks": days[day]} for day in sorted(days)]


def agenda(
    schedules: Iterable,
    completions: Iterable,
    clock: Optional[Clock] = None,
    limit: Optional[int] = None,
    asset_names: Optional[dict] = None,
) -> list[dict]:
    """The next ``limit`` occurrences due today or later."""
    clock = clock or get_clock()
    if limit is None:
        limit = settings.agenda_default_limit
    if limit < 1:
        raise ValidationError.for_field("limit", "limit must be at least 1")
    today = clock.today()

    by_id = {field_of(s, "id"): s for s in _active(schedules)}
    upcoming = (
        occ for occ in project_many(by_id.values(), completions, clock=clock, skip_invalid=True)
        if occ.nominal_date >= today
    )
    return [task_dict(occ, by_id[occ.schedule_id], asset_names) for occ in islice(upcoming, limit)]


def completion_history(schedule_id: int, completions: Iterable) -> list:
    """Completions of one schedule, newest first."""
    rows = [c for c in completions if field_of(c, "schedule_id") == schedule_id]
    return sorted(
        rows,
        key=lambda c: (as_day(field_of(c, "completed_date")), field_of(c, "id") or 0),
        reverse=True,
    )


def schedule_summary(schedule, completions: Iterable, clock: Optional[Clock] = None) -> dict:
    """Last completion, next due occurrence and overdue count for a schedule."""
    clock = clock or get_clock()
    completions = list(completions)
    history = completion_history(field_of(schedule, "id"), completions)
    last_completed = as_day(field_of(history[0], "completed_date")) if history else None

    stream = project(schedule, completions, clock=clock)
    first = next(stream, None)
    overdue_count = 0
    if first is not None and first.is_overdue:
        overdue_count = 1 + sum(1 for occ in takewhile(lambda o: o.is_overdue, stream))

    return {
        "schedule_id": field_of(schedule, "id"),
        "last_completed": last_completed,
        "next_due": first.nominal_date if first else None,
        "overdue_count": overdue_count,
        "is_overdue": overdue_count > 0,
    }


def monthly_completion_counts(
    completions: Iterable,
    clock: Optional[Clock] = None,
    months: int = 6,
) -> list[dict]:
    """Completion counts for the last ``months`` calendar months, oldest first."""
    if months < 1:
        raise ValidationError.for_field("months", "months must be at least 1")
    clock = clock or get_clock()
    current = clock.today().replace(day=1)

    counts = Counter()
    for completion in completions:
        day = as_day(field_of(completion, "completed_date"))
        if day is not None:
            counts[(day.year, day.month)] += 1

    series = []
    for offset in range(months - 1, -1, -1):
        month = current - relativedelta(months=offset)
        series.append({"month": month.strftime("%Y-%m"), "count": counts[(month.year, month.month)]})
    return series
