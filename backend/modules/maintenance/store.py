"""
modules/maintenance/store.py — Schedule Definition Store.

Thin repository over a SQLAlchemy Session for schedules, completions and
change-log rows. Every write commits; SQLAlchemy errors propagate unchanged
to the caller.
"""

from datetime import date
from typing import Iterable, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from modules.maintenance.models import (
    MaintenanceSchedule,
    MaintenanceCompletion,
    MaintenanceChangeLog,
)


class MaintenanceStore:
    """CRUD for the maintenance tables, scoped to one session."""

    def __init__(self, db: Session):
        self.db = db

    # ============== Schedules ==============

    def list_schedules(
        self,
        start: Optional[date] = None,
        end: Optional[date] = None,
        asset_id: Optional[int] = None,
    ) -> list[MaintenanceSchedule]:
        """List schedules, optionally only those active within [start, end]."""
        query = self.db.query(MaintenanceSchedule)
        if asset_id is not None:
            query = query.filter(MaintenanceSchedule.asset_id == asset_id)
        if end is not None:
            query = query.filter(MaintenanceSchedule.start_date <= end)
        if start is not None:
            query = query.filter(or_(
                MaintenanceSchedule.end_date.is_(None),
                MaintenanceSchedule.end_date >= start,
            ))
        return query.order_by(MaintenanceSchedule.start_date, MaintenanceSchedule.id).all()

    def get_schedule(self, schedule_id: int) -> Optional[MaintenanceSchedule]:
        return self.db.query(MaintenanceSchedule).filter(MaintenanceSchedule.id == schedule_id).first()

    def insert_schedule(self, data: dict) -> MaintenanceSchedule:
        schedule = MaintenanceSchedule(**data)
        self.db.add(schedule)
        self.db.commit()
        self.db.refresh(schedule)
        return schedule

    def update_schedule(self, schedule_id: int, partial: dict) -> Optional[MaintenanceSchedule]:
        schedule = self.get_schedule(schedule_id)
        if schedule is None:
            return None
        for field, value in partial.items():
            setattr(schedule, field, value)
        self.db.commit()
        self.db.refresh(schedule)
        return schedule

    def delete_schedule(self, schedule_id: int) -> bool:
        schedule = self.get_schedule(schedule_id)
        if schedule is None:
            return False
        self.db.delete(schedule)
        self.db.commit()
        return True

    # ============== Completions ==============

    def list_completions(self, schedule_id: Optional[int] = None) -> list[MaintenanceCompletion]:
        query = self.db.query(MaintenanceCompletion)
        if schedule_id is not None:
            query = query.filter(MaintenanceCompletion.schedule_id == schedule_id)
        return query.order_by(MaintenanceCompletion.completed_date, MaintenanceCompletion.id).all()

    def get_completion(self, completion_id: int) -> Optional[MaintenanceCompletion]:
        return self.db.query(MaintenanceCompletion).filter(MaintenanceCompletion.id == completion_id).first()

    def insert_completion(self, schedule_id: int, completed_date: date, notes: Optional[str] = None) -> MaintenanceCompletion:
        completion = MaintenanceCompletion(
            schedule_id=schedule_id,
            completed_date=completed_date,
            notes=notes,
        )
        self.db.add(completion)
        self.db.commit()
        self.db.refresh(completion)
        return completion

    def delete_completions(self, schedule_id: int, commit: bool = True) -> int:
        count = (
            self.db.query(MaintenanceCompletion)
            .filter(MaintenanceCompletion.schedule_id == schedule_id)
            .delete(synchronize_session=False)
        )
        if commit:
            self.db.commit()
        return count

    # ============== Change log ==============

    def list_change_logs(self, schedule_id: Optional[int] = None) -> list[MaintenanceChangeLog]:
        query = self.db.query(MaintenanceChangeLog)
        if schedule_id is not None:
            query = query.filter(MaintenanceChangeLog.schedule_id == schedule_id)
        return query.order_by(MaintenanceChangeLog.changed_at, MaintenanceChangeLog.id).all()

    def insert_change_logs(self, rows: Iterable[dict]) -> list[MaintenanceChangeLog]:
        entries = [MaintenanceChangeLog(**row) for row in rows]
        if not entries:
            return []
        self.db.add_all(entries)
        self.db.commit()
        return entries

    def delete_change_logs(self, schedule_id: int, commit: bool = True) -> int:
        count = (
            self.db.query(MaintenanceChangeLog)
            .filter(MaintenanceChangeLog.schedule_id == schedule_id)
            .delete(synchronize_session=False)
        )
        if commit:
            self.db.commit()
        return count
