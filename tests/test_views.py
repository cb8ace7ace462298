"""
Dashboard, calendar, agenda, summary and analytics views.

All views read the projector output; these tests pin "now" to 2024-02-01 and
use plain dicts for schedules and completions.
"""

from datetime import date

import pytest

from core.clock import FixedClock
from core.errors import ValidationError
from modules.maintenance import views

NOW = FixedClock(date(2024, 2, 1))


def _schedule(id=1, **overrides):
    schedule = {
        "id": id,
        "title": f"Task {id}",
        "asset_id": 10,
        "frequency": "WEEKLY",
        "start_date": date(2024, 1, 1),
        "end_date": None,
        "status": "SCHEDULED",
    }
    schedule.update(overrides)
    return schedule


def _completion(day, schedule_id=1, id=None):
    return {"id": id, "schedule_id": schedule_id, "completed_date": day}


class TestDashboard:
    def test_today_tab_lists_overdue_then_today(self):
        schedules = [
            _schedule(1),
            _schedule(2, frequency="DAILY", start_date=date(2024, 2, 1)),
        ]
        board = views.dashboard_tasks(schedules, [], clock=NOW, tab="today", asset_names={10: "Boiler"})

        assert board["today"] == "2024-02-01"
        assert board["overdue_count"] == 5
        assert board["today_count"] == 1
        tasks = board["tasks"]
        assert [t["is_overdue"] for t in tasks] == [True] * 5 + [False]
        assert tasks[-1]["schedule_id"] == 2
        assert tasks[0]["asset_name"] == "Boiler"
        assert all(t["display_date"] == "2024-02-01" for t in tasks)

    def test_overdue_tab(self):
        schedules = [_schedule(1), _schedule(2, frequency="DAILY", start_date=date(2024, 2, 1))]
        board = views.dashboard_tasks(schedules, [], clock=NOW, tab="overdue")
        assert len(board["tasks"]) == 5
        assert all(t["is_overdue"] for t in board["tasks"])

    def test_completions_reduce_overdue_count(self):
        completions = [_completion(date(2024, 1, 8)), _completion(date(2024, 1, 15))]
        board = views.dashboard_tasks([_schedule(1)], completions, clock=NOW, tab="all")
        assert board["overdue_count"] == 3

    def test_completed_schedules_are_hidden(self):
        board = views.dashboard_tasks([_schedule(1, status="COMPLETED")], [], clock=NOW, tab="all")
        assert board["tasks"] == []

    def test_future_occurrences_not_on_dashboard(self):
        board = views.dashboard_tasks([_schedule(1, start_date=date(2024, 3, 1))], [], clock=NOW, tab="all")
        assert board["tasks"] == []

    def test_bad_tab(self):
        with pytest.raises(ValidationError):
            views.dashboard_tasks([], [], clock=NOW, tab="later")


class TestCalendar:
    def test_overdue_collect_on_today(self):
        days = views.calendar_events([_schedule(1)], [], date(2024, 2, 1), date(2024, 2, 29), clock=NOW)
        assert [d["date"] for d in days] == [
            "2024-02-01", "2024-02-05", "2024-02-12", "2024-02-19", "2024-02-26",
        ]
        assert len(days[0]["tasks"]) == 5
        assert len(days[1]["tasks"]) == 1

    def test_window_without_today_has_no_overdue(self):
        days = views.calendar_events([_schedule(1)], [], date(2024, 3, 1), date(2024, 3, 31), clock=NOW)
        assert all(not t["is_overdue"] for d in days for t in d["tasks"])
        assert [d["date"] for d in days] == ["2024-03-04", "2024-03-11", "2024-03-18", "2024-03-25"]

    def test_end_date_of_schedule_respected(self):
        schedule = _schedule(1, start_date=date(2024, 2, 5), end_date=date(2024, 2, 12))
        days = views.calendar_events([schedule], [], date(2024, 2, 1), date(2024, 2, 29), clock=NOW)
        assert [d["date"] for d in days] == ["2024-02-05", "2024-02-12"]

    def test_inverted_window(self):
        with pytest.raises(ValidationError):
            views.calendar_events([], [], date(2024, 3, 1), date(2024, 2, 1), clock=NOW)


class TestAgenda:
    def test_next_n(self):
        tasks = views.agenda([_schedule(1)], [], clock=NOW, limit=3)
        assert [t["nominal_date"] for t in tasks] == ["2024-02-05", "2024-02-12", "2024-02-19"]

    def test_merges_schedules(self):
        schedules = [_schedule(1), _schedule(2, frequency="MONTHLY", start_date=date(2024, 2, 3))]
        tasks = views.agenda(schedules, [], clock=NOW, limit=3)
        assert [(t["schedule_id"], t["nominal_date"]) for t in tasks] == [
            (2, "2024-02-03"), (1, "2024-02-05"), (1, "2024-02-12"),
        ]

    def test_limit_must_be_positive(self):
        with pytest.raises(ValidationError):
            views.agenda([], [], clock=NOW, limit=0)


class TestSummary:
    def test_summary(self):
        completions = [_completion(date(2024, 1, 8), id=1), _completion(date(2024, 1, 22), id=2)]
        summary = views.schedule_summary(_schedule(1), completions, clock=NOW)
        assert summary == {
            "schedule_id": 1,
            "last_completed": date(2024, 1, 22),
            "next_due": date(2024, 1, 1),
            "overdue_count": 3,
            "is_overdue": True,
        }

    def test_summary_all_caught_up(self):
        completions = [_completion(date(2024, 1, d), id=d) for d in (1, 8, 15, 22, 29)]
        summary = views.schedule_summary(_schedule(1), completions, clock=NOW)
        assert summary["next_due"] == date(2024, 2, 5)
        assert summary["overdue_count"] == 0
        assert summary["is_overdue"] is False

    def test_history_newest_first(self):
        completions = [
            _completion(date(2024, 1, 8), id=1),
            _completion(date(2024, 1, 22), id=2),
            _completion(date(2024, 1, 15), id=3, schedule_id=2),
        ]
        history = views.completion_history(1, completions)
        assert [c["id"] for c in history] == [2, 1]


class TestAnalytics:
    def test_monthly_counts(self):
        completions = [
            _completion(date(2023, 12, 5)),
            _completion(date(2024, 1, 8)),
            _completion(date(2024, 1, 15)),
            _completion(date(2023, 6, 1)),
        ]
        series = views.monthly_completion_counts(completions, clock=NOW, months=3)
        assert series == [
            {"month": "2023-12", "count": 1},
            {"month": "2024-01", "count": 2},
            {"month": "2024-02", "count": 0},
        ]

    def test_default_six_months(self):
        assert len(views.monthly_completion_counts([], clock=NOW)) == 6
