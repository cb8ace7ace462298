"""
modules/maintenance/recorder.py — Completion and change-log recording.

record_completion() appends a completion row for a schedule; the projector
treats any completion on an occurrence's calendar day as fulfilling it, so no
dedup happens here.

record_change() appends audit rows describing a schedule definition mutation:
  CREATE  one row, new_value = whole new record
  DELETE  one row, old_value = whole prior record
  EDIT    one row per field whose serialized value changed

Change-log writes are best effort: a failed insert is rolled back and logged,
never re-raised, so it cannot undo the mutation it describes.
"""

import json
import logging
from datetime import date, datetime
from enum import Enum
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from core.base import ChangeType
from core.clock import get_clock
from core.errors import NotFoundError, ValidationError
from core.interfaces.clock import Clock
from modules.maintenance.models import MaintenanceCompletion
from modules.maintenance.projector import as_day, field_of
from modules.maintenance.store import MaintenanceStore

log = logging.getLogger("upkeep.changelog")

# Schedule fields captured in snapshots and compared on edit
TRACKED_FIELDS = (
    "title",
    "description",
    "asset_id",
    "frequency",
    "start_date",
    "end_date",
    "status",
    "affects_asset_status",
)


def serialize_value(value) -> Optional[str]:
    """Normalize a field value to the string stored in the change log.

    Enums collapse to their value and dates to ISO format, so a
    MaintenanceFrequency member and its string value compare equal.
    """
    if value is None:
        return None
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, (dict, list, tuple)):
        return json.dumps(value, sort_keys=True, default=str)
    return str(value)


def snapshot(schedule) -> dict:
    """Tracked field values of a schedule (ORM row, schema or dict)."""
    return {name: field_of(schedule, name) for name in TRACKED_FIELDS}


def serialize_record(record: dict) -> str:
    """Serialize a whole-record snapshot as stable JSON."""
    return json.dumps(
        {name: serialize_value(value) for name, value in record.items()},
        sort_keys=True,
    )


def changed_fields(old: dict, new: dict) -> dict:
    """Return {field: (old, new)} for fields whose serialized values differ.

    Only fields present in ``new`` are compared.
    """
    diffs = {}
    for name, new_value in new.items():
        old_value = old.get(name)
        if serialize_value(old_value) != serialize_value(new_value):
            diffs[name] = (old_value, new_value)
    return diffs


def build_change_rows(
    schedule_id: int,
    change_type,
    changed_by: Optional[str],
    field_diffs: dict,
    changed_at: datetime,
) -> list[dict]:
    """Translate a mutation into change-log row dicts (see module docstring)."""
    change_type = ChangeType(change_type)
    base = {
        "schedule_id": schedule_id,
        "changed_by": changed_by,
        "change_type": change_type.value,
        "changed_at": changed_at,
    }

    if change_type == ChangeType.CREATE:
        return [dict(base, field_name=None, old_value=None, new_value=serialize_record(field_diffs))]
    if change_type == ChangeType.DELETE:
        return [dict(base, field_name=None, old_value=serialize_record(field_diffs), new_value=None)]

    rows = []
    for name, (old_value, new_value) in field_diffs.items():
        old_text = serialize_value(old_value)
        new_text = serialize_value(new_value)
        if old_text == new_text:
            continue
        rows.append(dict(base, field_name=name, old_value=old_text, new_value=new_text))
    return rows


def record_change(
    db: Session,
    schedule_id: int,
    change_type,
    changed_by: Optional[str],
    field_diffs: dict,
    clock: Optional[Clock] = None,
) -> None:
    """Append change-log rows for a schedule mutation.

    ``field_diffs`` is the whole new record for CREATE, the whole prior
    record for DELETE, and {field: (old, new)} for EDIT.
    """
    clock = clock or get_clock()
    rows = build_change_rows(schedule_id, change_type, changed_by, field_diffs, clock.now())
    if not rows:
        return
    try:
        MaintenanceStore(db).insert_change_logs(rows)
    except SQLAlchemyError:
        db.rollback()
        log.warning(
            f"Change log write failed for schedule {schedule_id} "
            f"({ChangeType(change_type).value}, {len(rows)} row(s)); mutation kept",
            exc_info=True,
        )
        return
    log.debug(f"Logged {len(rows)} {ChangeType(change_type).value} row(s) for schedule {schedule_id}")


def record_completion(
    db: Session,
    schedule_id: int,
    completed_date,
    notes: Optional[str] = None,
) -> MaintenanceCompletion:
    """Append a completion for ``schedule_id`` on ``completed_date``.

    Raises NotFoundError for an unknown schedule and ValidationError for a
    missing date. Asset-status propagation is left to the caller.
    """
    day = as_day(completed_date)
    if day is None:
        raise ValidationError.for_field("completed_date", "Completed date is required")

    store = MaintenanceStore(db)
    if store.get_schedule(schedule_id) is None:
        raise NotFoundError("Maintenance schedule", schedule_id)

    completion = store.insert_completion(schedule_id, day, notes)
    log.info(f"Schedule {schedule_id} completed on {day.isoformat()} (completion {completion.id})")
    return completion
