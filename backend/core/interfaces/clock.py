# core/interfaces/clock.py
from abc import ABC, abstractmethod
from datetime import date, datetime


class Clock(ABC):
    """Single source of "now" for recurrence and overdue math."""

    @abstractmethod
    def now(self) -> datetime: ...

    def today(self) -> date:
        return self.now().date()
