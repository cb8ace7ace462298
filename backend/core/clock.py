# core/clock.py — Clock implementations
#
# SystemClock reads wall time in the configured zone; FixedClock pins "now"
# for tests and what-if projections. Routes receive the clock through the
# get_clock dependency so tests can override it on the app.

from datetime import date, datetime, time
from typing import Optional, Union
from zoneinfo import ZoneInfo

from core.config import settings
from core.interfaces.clock import Clock


class SystemClock(Clock):
    """Wall clock, expressed as naive local time in ``time_zone``."""

    def __init__(self, time_zone: Optional[str] = None):
        self._zone = ZoneInfo(time_zone or settings.time_zone)

    def now(self) -> datetime:
        return datetime.now(self._zone).replace(tzinfo=None)


class FixedClock(Clock):
    """Clock frozen at a given instant. Accepts a date (midnight) or datetime."""

    def __init__(self, at: Union[date, datetime]):
        if not isinstance(at, datetime):
            at = datetime.combine(at, time.min)
        self._now = at

    def now(self) -> datetime:
        return self._now

    def set(self, at: Union[date, datetime]) -> None:
        if not isinstance(at, datetime):
            at = datetime.combine(at, time.min)
        self._now = at


_default_clock: Clock = SystemClock()


def get_clock() -> Clock:
    """FastAPI dependency returning the process-wide clock."""
    return _default_clock
