"""
maintenance/services.py — ScheduleService

Orchestrates schedule definition mutations: validate input, write through
MaintenanceStore, append change-log rows via the recorder, then publish an
event so callers can refresh whatever they cache.

Ordering rules:
  create/edit  store write commits first, change-log rows follow
  delete       DELETE row first, then completions and change-log rows,
               then the schedule itself
"""

import logging
from enum import Enum
from typing import Optional

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from core import events
from core.base import AssetStatus, ChangeType
from core.clock import get_clock
from core.errors import NotFoundError, ValidationError
from core.event_bus import get_event_bus
from core.interfaces.asset_status import AssetStatusProvider
from core.interfaces.clock import Clock
from core.interfaces.event_bus import Event, EventBus
from core.registry import registry
from modules.maintenance.models import MaintenanceSchedule, MaintenanceCompletion
from modules.maintenance.projector import Occurrence, project
from modules.maintenance.recorder import (
    changed_fields,
    record_change,
    record_completion,
    snapshot,
)
from modules.maintenance.schemas import ScheduleCreate, ScheduleUpdate
from modules.maintenance.store import MaintenanceStore

log = logging.getLogger("upkeep.api")

# Columns that may be omitted from a PATCH but never set to null
_NON_NULLABLE = ("title", "description", "asset_id", "frequency", "start_date", "status", "affects_asset_status")


def _to_columns(values: dict) -> dict:
    """Convert schema output to column values (enums stored by value)."""
    return {
        name: value.value if isinstance(value, Enum) else value
        for name, value in values.items()
    }


class ScheduleService:
    """Schedule CRUD plus completion and projection entry points."""

    def __init__(
        self,
        db: Session,
        clock: Optional[Clock] = None,
        bus: Optional[EventBus] = None,
        assets: Optional[AssetStatusProvider] = None,
    ):
        self.db = db
        self.store = MaintenanceStore(db)
        self.clock = clock or get_clock()
        self.bus = bus or get_event_bus()
        self.assets = assets or registry.providers.get("AssetStatusProvider")

    # ============== Helpers ==============

    @staticmethod
    def _parse(schema_cls, data):
        if isinstance(data, schema_cls):
            return data
        try:
            return schema_cls.model_validate(data)
        except PydanticValidationError as e:
            raise ValidationError.from_pydantic(e) from None

    def _require_asset(self, asset_id: int) -> None:
        if self.assets is None:
            log.debug("No AssetStatusProvider registered; skipping asset existence check")
            return
        if self.assets.get_asset_status(self.db, asset_id) is None:
            raise NotFoundError("Asset", asset_id)

    def _publish(self, event_type: str, **data) -> None:
        self.bus.publish(Event(event_type=event_type, source_module="maintenance", data=data))

    # ============== Reads ==============

    def get_schedule(self, schedule_id: int) -> MaintenanceSchedule:
        schedule = self.store.get_schedule(schedule_id)
        if schedule is None:
            raise NotFoundError("Maintenance schedule", schedule_id)
        return schedule

    def list_schedules(self, start=None, end=None, asset_id: Optional[int] = None) -> list[MaintenanceSchedule]:
        if start is not None and end is not None and start > end:
            raise ValidationError.for_field("end", "end must be on or after start")
        return self.store.list_schedules(start=start, end=end, asset_id=asset_id)

    def list_completions(self, schedule_id: Optional[int] = None) -> list[MaintenanceCompletion]:
        if schedule_id is not None:
            self.get_schedule(schedule_id)
        return self.store.list_completions(schedule_id)

    def list_changes(self, schedule_id: int):
        self.get_schedule(schedule_id)
        return self.store.list_change_logs(schedule_id)

    def occurrences(self, schedule_id: int, horizon_end=None) -> list[Occurrence]:
        schedule = self.get_schedule(schedule_id)
        completions = self.store.list_completions(schedule_id)
        return list(project(schedule, completions, horizon_end=horizon_end, clock=self.clock))

    # ============== Mutations ==============

    def create_schedule(self, data, changed_by: Optional[str] = None) -> MaintenanceSchedule:
        """Validate and insert a schedule, then log it as CREATE."""
        payload = self._parse(ScheduleCreate, data)
        self._require_asset(payload.asset_id)

        schedule = self.store.insert_schedule(_to_columns(payload.model_dump()))
        record_change(self.db, schedule.id, ChangeType.CREATE, changed_by, snapshot(schedule), clock=self.clock)

        log.info(f"Maintenance schedule {schedule.id} created for asset {schedule.asset_id}: {schedule.title!r}")
        self._publish(events.SCHEDULE_CREATED, schedule_id=schedule.id, asset_id=schedule.asset_id, changed_by=changed_by)
        return schedule

    def update_schedule(self, schedule_id: int, data, changed_by: Optional[str] = None) -> MaintenanceSchedule:
        """Apply a partial update; one EDIT row per field that actually changed."""
        payload = self._parse(ScheduleUpdate, data)
        partial = _to_columns(payload.model_dump(exclude_unset=True))

        errors = [
            {"field": name, "message": f"{name} cannot be null"}
            for name in _NON_NULLABLE
            if name in partial and partial[name] is None
        ]
        if errors:
            raise ValidationError("Validation error", errors=errors)

        schedule = self.get_schedule(schedule_id)
        start = partial.get("start_date", schedule.start_date)
        end = partial["end_date"] if "end_date" in partial else schedule.end_date
        if end is not None and start > end:
            raise ValidationError.for_field("end_date", "end_date must be on or after start_date")
        if "asset_id" in partial and partial["asset_id"] != schedule.asset_id:
            self._require_asset(partial["asset_id"])

        diffs = changed_fields(snapshot(schedule), partial)
        if not diffs:
            return schedule

        try:
            schedule = self.store.update_schedule(schedule_id, {name: new for name, (_, new) in diffs.items()})
        except SQLAlchemyError:
            self.db.rollback()
            raise

        record_change(self.db, schedule_id, ChangeType.EDIT, changed_by, diffs, clock=self.clock)

        log.info(f"Maintenance schedule {schedule_id} updated: {sorted(diffs)}")
        self._publish(events.SCHEDULE_UPDATED, schedule_id=schedule_id, fields=sorted(diffs), changed_by=changed_by)
        return schedule

    def delete_schedule(self, schedule_id: int, changed_by: Optional[str] = None) -> None:
        """Log the DELETE, then remove completions, change log and the schedule."""
        schedule = self.get_schedule(schedule_id)
        asset_id = schedule.asset_id
        record_change(self.db, schedule_id, ChangeType.DELETE, changed_by, snapshot(schedule), clock=self.clock)

        try:
            completions = self.store.delete_completions(schedule_id, commit=False)
            changes = self.store.delete_change_logs(schedule_id, commit=False)
            self.store.delete_schedule(schedule_id)
        except SQLAlchemyError:
            self.db.rollback()
            raise

        log.info(
            f"Maintenance schedule {schedule_id} deleted "
            f"({completions} completion(s), {changes} change log row(s) removed)"
        )
        self._publish(events.SCHEDULE_DELETED, schedule_id=schedule_id, asset_id=asset_id, changed_by=changed_by)

    def complete_schedule(self, schedule_id: int, completed_date, notes: Optional[str] = None) -> MaintenanceCompletion:
        """Record a completion. Does not touch the asset (see propagate_asset_status)."""
        completion = record_completion(self.db, schedule_id, completed_date, notes)
        self._publish(
            events.MAINTENANCE_COMPLETED,
            schedule_id=schedule_id,
            completion_id=completion.id,
            completed_date=completion.completed_date.isoformat(),
        )
        return completion

    # ============== Asset status ==============

    def propagate_asset_status(self, schedule_id: int) -> dict:
        """Put the schedule's asset into MAINTENANCE when the schedule is overdue.

        Only schedules flagged ``affects_asset_status`` propagate. Callers
        invoke this explicitly; completions and edits never trigger it.
        """
        schedule = self.get_schedule(schedule_id)
        result = {
            "schedule_id": schedule.id,
            "asset_id": schedule.asset_id,
            "affects_asset_status": bool(schedule.affects_asset_status),
            "is_overdue": False,
            "old_status": None,
            "new_status": None,
            "changed": False,
        }
        if not schedule.affects_asset_status:
            return result

        completions = self.store.list_completions(schedule.id)
        first = next(iter(project(schedule, completions, clock=self.clock)), None)
        result["is_overdue"] = bool(first and first.is_overdue)
        if not result["is_overdue"]:
            return result

        if self.assets is None:
            raise RuntimeError("AssetStatusProvider is not registered; cannot propagate asset status")

        old_status = self.assets.get_asset_status(self.db, schedule.asset_id)
        if old_status is None:
            raise NotFoundError("Asset", schedule.asset_id)
        result["old_status"] = old_status
        result["new_status"] = old_status

        target = AssetStatus.MAINTENANCE.value
        if old_status != target:
            self.assets.set_asset_status(self.db, schedule.asset_id, target)
            result["new_status"] = target
            result["changed"] = True
            log.info(f"Asset {schedule.asset_id} set to {target} by overdue schedule {schedule.id}")
            self._publish(
                events.ASSET_STATUS_CHANGED,
                asset_id=schedule.asset_id,
                old_status=old_status,
                new_status=target,
                schedule_id=schedule.id,
            )
        return result
