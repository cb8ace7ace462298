"""
modules/maintenance/projector.py — Occurrence projection for recurring schedules.

Given a schedule definition and completion history, walks the schedule's
calendar from its start date to its end date (or a rolling horizon for
open-ended schedules) and yields every occurrence that has no completion on
the same calendar day.

The projection is a pure function of (schedule, completions, horizon, clock).
Dashboard, calendar, agenda and summary views all consume it; none of them
step dates on their own.

Schedules and completions are read by attribute (ORM rows, schemas, or any
object with the same field names) or by key (plain dicts).
"""

import heapq
import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Iterable, Iterator, Optional

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

from core.base import MaintenanceFrequency
from core.clock import get_clock
from core.config import settings
from core.errors import UnknownFrequencyError, ValidationError
from core.interfaces.clock import Clock

log = logging.getLogger("upkeep.projector")

FREQUENCY_STEPS = {
    MaintenanceFrequency.DAILY: relativedelta(days=1),
    MaintenanceFrequency.WEEKLY: relativedelta(days=7),
    MaintenanceFrequency.MONTHLY: relativedelta(months=1),
    MaintenanceFrequency.QUARTERLY: relativedelta(months=3),
    MaintenanceFrequency.BIANNUAL: relativedelta(months=6),
    MaintenanceFrequency.YEARLY: relativedelta(months=12),
    MaintenanceFrequency.TWO_YEAR: relativedelta(months=24),
}


@dataclass(frozen=True)
class Occurrence:
    """One derived instance of a schedule being due. Never persisted."""
    schedule_id: int
    nominal_date: date      # the date the occurrence was originally due
    display_date: date      # today for unresolved past occurrences, else nominal_date
    is_overdue: bool
    days_overdue: int

    def to_dict(self) -> dict:
        return {
            "schedule_id": self.schedule_id,
            "nominal_date": self.nominal_date.isoformat(),
            "display_date": self.display_date.isoformat(),
            "is_overdue": self.is_overdue,
            "days_overdue": self.days_overdue,
        }


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def field_of(obj, name: str, default=None):
    """Read ``name`` from a dict or an attribute-bearing object."""
    if isinstance(obj, dict):
        return obj.get(name, default)
    return getattr(obj, name, default)


def as_day(value) -> Optional[date]:
    """Normalize a date, datetime or ISO-ish string to a calendar day.

    Time-of-day is discarded, so 2024-01-08T23:30 and 2024-01-08 are the
    same day. None passes through.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date_parser.isoparse(value).date()
        except ValueError:
            try:
                return date_parser.parse(value).date()
            except (ValueError, OverflowError) as e:
                raise ValidationError.for_field("date", f"Unparseable date {value!r}") from e
    raise ValidationError.for_field("date", f"Unsupported date value {value!r}")


def frequency_step(frequency) -> relativedelta:
    """Return the calendar increment for a frequency.

    Raises UnknownFrequencyError rather than letting a projection stop early.
    """
    try:
        return FREQUENCY_STEPS[MaintenanceFrequency.coerce(frequency)]
    except (ValueError, KeyError):
        raise UnknownFrequencyError(frequency) from None


def default_horizon(clock: Optional[Clock] = None, months: Optional[int] = None) -> date:
    """Rolling end date used for schedules without an end date."""
    clock = clock or get_clock()
    if months is None:
        months = settings.projection_horizon_months
    return clock.today() + relativedelta(months=months)


def completed_days(schedule_id, completions: Iterable) -> set:
    """Calendar days on which ``schedule_id`` has at least one completion."""
    days = set()
    for completion in completions or ():
        if field_of(completion, "schedule_id") != schedule_id:
            continue
        day = as_day(field_of(completion, "completed_date"))
        if day is not None:
            days.add(day)
    return days


# ---------------------------------------------------------------------------
# Projection
# ---------------------------------------------------------------------------

def project(
    schedule,
    completions: Iterable = (),
    horizon_end=None,
    clock: Optional[Clock] = None,
) -> Iterator[Occurrence]:
    """Project the due occurrences of ``schedule``.

    ``completions`` may be the full completion list; only rows for this
    schedule are considered. ``horizon_end`` bounds open-ended schedules and
    defaults to today plus the configured horizon. Inputs are validated
    eagerly; occurrences are produced lazily in ascending nominal-date order.
    """
    clock = clock or get_clock()
    step = frequency_step(field_of(schedule, "frequency"))

    start = as_day(field_of(schedule, "start_date"))
    if start is None:
        raise ValidationError.for_field("start_date", "Schedule has no start date")

    end = as_day(field_of(schedule, "end_date"))
    if end is None:
        end = as_day(horizon_end) if horizon_end is not None else default_horizon(clock)

    schedule_id = field_of(schedule, "id")
    done = completed_days(schedule_id, completions)
    today = clock.today()

    return _walk(schedule_id, start, end, step, done, today)


def _walk(schedule_id, start: date, end: date, step: relativedelta, done: set, today: date):
    cursor = start
    while cursor <= end:
        if cursor not in done:
            overdue_days = (today - cursor).days if cursor < today else 0
            yield Occurrence(
                schedule_id=schedule_id,
                nominal_date=cursor,
                display_date=today if cursor < today else cursor,
                is_overdue=overdue_days > 0,
                days_overdue=overdue_days,
            )
        cursor = cursor + step


def project_many(
    schedules: Iterable,
    completions: Iterable = (),
    horizon_end=None,
    clock: Optional[Clock] = None,
    skip_invalid: bool = False,
) -> Iterator[Occurrence]:
    """Merge the projections of several schedules, ascending by nominal date.

    With ``skip_invalid`` a schedule that fails validation (e.g. a legacy row
    with an unknown frequency) is logged and left out instead of aborting
    the whole listing.
    """
    clock = clock or get_clock()
    completions = list(completions or ())
    streams = []
    for schedule in schedules:
        try:
            streams.append(project(schedule, completions, horizon_end=horizon_end, clock=clock))
        except ValidationError as e:
            if not skip_invalid:
                raise
            log.warning(f"Skipping schedule {field_of(schedule, 'id')} in projection: {e.message}")
    return heapq.merge(*streams, key=lambda occ: occ.nominal_date)
