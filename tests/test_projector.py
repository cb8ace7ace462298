"""
Occurrence projector tests.

Pure-function tests: schedules and completions are plain dicts, "now" comes
from a FixedClock. No database involved.

Run:
    pytest tests/test_projector.py -v
"""

from datetime import date, datetime, timedelta

import pytest

from core.clock import FixedClock
from core.errors import UnknownFrequencyError, ValidationError
from modules.maintenance.projector import (
    Occurrence,
    as_day,
    default_horizon,
    frequency_step,
    project,
    project_many,
)

NOW = FixedClock(date(2024, 2, 1))


def _schedule(**overrides):
    schedule = {
        "id": 1,
        "frequency": "WEEKLY",
        "start_date": date(2024, 1, 1),
        "end_date": None,
    }
    schedule.update(overrides)
    return schedule


def _completion(day, schedule_id=1):
    return {"schedule_id": schedule_id, "completed_date": day}


def _nominal(occurrences):
    return [occ.nominal_date for occ in occurrences]


# ---------------------------------------------------------------------------
# Worked examples
# ---------------------------------------------------------------------------

class TestWeeklyExamples:
    def test_weekly_without_completions(self):
        occurrences = list(project(_schedule(), [], horizon_end=date(2024, 1, 31), clock=NOW))
        assert _nominal(occurrences) == [
            date(2024, 1, 1),
            date(2024, 1, 8),
            date(2024, 1, 15),
            date(2024, 1, 22),
            date(2024, 1, 29),
        ]
        assert all(occ.is_overdue for occ in occurrences)

    def test_weekly_completion_suppresses_its_day(self):
        completions = [_completion(date(2024, 1, 8))]
        occurrences = list(project(_schedule(), completions, horizon_end=date(2024, 1, 31), clock=NOW))
        assert len(occurrences) == 4
        assert date(2024, 1, 8) not in _nominal(occurrences)

    def test_days_overdue_counts_from_nominal_date(self):
        first = next(project(_schedule(), [], horizon_end=date(2024, 1, 31), clock=NOW))
        assert first.days_overdue == 31
        assert first.display_date == date(2024, 2, 1)


# ---------------------------------------------------------------------------
# Completion matching
# ---------------------------------------------------------------------------

class TestCompletionMatching:
    def test_single_completion_suppresses_exactly_one_day(self):
        schedule = _schedule(frequency="DAILY")
        completed = date(2024, 2, 10)
        horizon = default_horizon(NOW)

        occurrences = _nominal(project(schedule, [_completion(completed)], clock=NOW))

        expected = []
        day = date(2024, 1, 1)
        while day <= horizon:
            if day != completed:
                expected.append(day)
            day += timedelta(days=1)
        assert occurrences == expected

    def test_time_of_day_is_ignored(self):
        completions = [_completion(datetime(2024, 1, 8, 23, 30))]
        occurrences = _nominal(project(_schedule(), completions, horizon_end=date(2024, 1, 31), clock=NOW))
        assert date(2024, 1, 8) not in occurrences

    def test_iso_string_completion_dates_match(self):
        completions = [_completion("2024-01-15T09:00:00")]
        occurrences = _nominal(project(_schedule(), completions, horizon_end=date(2024, 1, 31), clock=NOW))
        assert date(2024, 1, 15) not in occurrences

    def test_completion_off_the_stepped_dates_suppresses_nothing(self):
        completions = [_completion(date(2024, 1, 9))]
        occurrences = list(project(_schedule(), completions, horizon_end=date(2024, 1, 31), clock=NOW))
        assert len(occurrences) == 5

    def test_completions_of_other_schedules_are_ignored(self):
        completions = [_completion(date(2024, 1, 8), schedule_id=2)]
        occurrences = list(project(_schedule(), completions, horizon_end=date(2024, 1, 31), clock=NOW))
        assert len(occurrences) == 5

    def test_duplicate_completions_on_one_day(self):
        completions = [_completion(date(2024, 1, 8)), _completion(date(2024, 1, 8))]
        occurrences = list(project(_schedule(), completions, horizon_end=date(2024, 1, 31), clock=NOW))
        assert len(occurrences) == 4


# ---------------------------------------------------------------------------
# Overdue and display date
# ---------------------------------------------------------------------------

class TestOverdue:
    def test_past_occurrences_display_on_today(self):
        schedule = _schedule(frequency="DAILY", start_date=date(2024, 1, 28))
        for occ in project(schedule, [], horizon_end=date(2024, 2, 5), clock=NOW):
            if occ.nominal_date < NOW.today():
                assert occ.is_overdue
                assert occ.display_date == NOW.today()
            else:
                assert not occ.is_overdue
                assert occ.days_overdue == 0
                assert occ.display_date == occ.nominal_date

    def test_occurrence_due_today_is_not_overdue(self):
        schedule = _schedule(frequency="DAILY", start_date=date(2024, 2, 1))
        first = next(project(schedule, [], horizon_end=date(2024, 2, 1), clock=NOW))
        assert first.nominal_date == date(2024, 2, 1)
        assert not first.is_overdue
        assert first.days_overdue == 0

    def test_clock_time_of_day_does_not_matter(self):
        late = FixedClock(datetime(2024, 2, 1, 23, 59))
        schedule = _schedule(frequency="DAILY", start_date=date(2024, 2, 1))
        first = next(project(schedule, [], horizon_end=date(2024, 2, 1), clock=late))
        assert not first.is_overdue


# ---------------------------------------------------------------------------
# Purity
# ---------------------------------------------------------------------------

class TestPurity:
    def test_same_inputs_same_output(self):
        schedule = _schedule(frequency="MONTHLY")
        completions = [_completion(date(2024, 3, 1))]
        first = list(project(schedule, completions, horizon_end=date(2024, 12, 31), clock=NOW))
        second = list(project(schedule, completions, horizon_end=date(2024, 12, 31), clock=NOW))
        assert first == second

    def test_inputs_are_not_mutated(self):
        schedule = _schedule()
        completions = [_completion(date(2024, 1, 8))]
        before = (dict(schedule), [dict(c) for c in completions])
        list(project(schedule, completions, horizon_end=date(2024, 1, 31), clock=NOW))
        assert (schedule, completions) == before

    def test_occurrence_to_dict(self):
        occ = Occurrence(1, date(2024, 1, 1), date(2024, 2, 1), True, 31)
        assert occ.to_dict() == {
            "schedule_id": 1,
            "nominal_date": "2024-01-01",
            "display_date": "2024-02-01",
            "is_overdue": True,
            "days_overdue": 31,
        }


# ---------------------------------------------------------------------------
# Bounds and stepping
# ---------------------------------------------------------------------------

class TestBounds:
    def test_end_date_overrides_horizon(self):
        schedule = _schedule(end_date=date(2024, 1, 15))
        occurrences = _nominal(project(schedule, [], horizon_end=date(2024, 12, 31), clock=NOW))
        assert occurrences == [date(2024, 1, 1), date(2024, 1, 8), date(2024, 1, 15)]

    def test_end_date_is_inclusive(self):
        schedule = _schedule(frequency="DAILY", start_date=date(2024, 3, 1), end_date=date(2024, 3, 1))
        assert _nominal(project(schedule, [], clock=NOW)) == [date(2024, 3, 1)]

    def test_default_horizon_is_three_months_from_today(self):
        assert default_horizon(NOW) == date(2024, 5, 1)
        schedule = _schedule(frequency="MONTHLY", start_date=date(2024, 2, 1))
        assert _nominal(project(schedule, [], clock=NOW))[-1] == date(2024, 5, 1)

    def test_start_after_end_projects_nothing(self):
        schedule = _schedule(start_date=date(2024, 6, 1), end_date=date(2024, 5, 1))
        assert list(project(schedule, [], clock=NOW)) == []

    def test_monthly_clamps_to_month_end(self):
        schedule = _schedule(frequency="MONTHLY", start_date=date(2024, 1, 31))
        occurrences = _nominal(project(schedule, [], horizon_end=date(2024, 4, 30), clock=NOW))
        assert occurrences == [
            date(2024, 1, 31),
            date(2024, 2, 29),
            date(2024, 3, 29),
            date(2024, 4, 29),
        ]

    @pytest.mark.parametrize("frequency,expected", [
        ("QUARTERLY", [date(2024, 1, 1), date(2024, 4, 1), date(2024, 7, 1), date(2024, 10, 1)]),
        ("BIANNUAL", [date(2024, 1, 1), date(2024, 7, 1)]),
        ("YEARLY", [date(2024, 1, 1)]),
    ])
    def test_calendar_month_frequencies(self, frequency, expected):
        schedule = _schedule(frequency=frequency, end_date=date(2024, 12, 31))
        assert _nominal(project(schedule, [], clock=NOW)) == expected

    def test_two_year_steps_twenty_four_months(self):
        schedule = _schedule(frequency="TWO_YEAR", start_date=date(2020, 3, 1), end_date=date(2026, 3, 1))
        assert _nominal(project(schedule, [], clock=NOW)) == [
            date(2020, 3, 1),
            date(2022, 3, 1),
            date(2024, 3, 1),
            date(2026, 3, 1),
        ]

    def test_lowercase_frequency_accepted(self):
        assert frequency_step("weekly") == frequency_step("WEEKLY")


# ---------------------------------------------------------------------------
# Rejection
# ---------------------------------------------------------------------------

class TestRejection:
    def test_unknown_frequency_raises_immediately(self):
        with pytest.raises(UnknownFrequencyError) as exc_info:
            project(_schedule(frequency="FORTNIGHTLY"), [], clock=NOW)
        assert exc_info.value.errors[0]["field"] == "frequency"

    def test_missing_frequency_raises(self):
        with pytest.raises(UnknownFrequencyError):
            project(_schedule(frequency=None), [], clock=NOW)

    def test_missing_start_date_raises(self):
        with pytest.raises(ValidationError):
            project(_schedule(start_date=None), [], clock=NOW)

    def test_unparseable_date(self):
        with pytest.raises(ValidationError):
            as_day("not a date")


# ---------------------------------------------------------------------------
# Merging several schedules
# ---------------------------------------------------------------------------

class TestProjectMany:
    def test_merged_stream_is_ascending(self):
        schedules = [
            _schedule(id=1, frequency="WEEKLY"),
            _schedule(id=2, frequency="MONTHLY", start_date=date(2024, 1, 3)),
        ]
        merged = list(project_many(schedules, [], horizon_end=date(2024, 2, 29), clock=NOW))
        days = _nominal(merged)
        assert days == sorted(days)
        assert {occ.schedule_id for occ in merged} == {1, 2}

    def test_invalid_schedule_aborts_by_default(self):
        schedules = [_schedule(id=1), _schedule(id=2, frequency="HOURLY")]
        with pytest.raises(UnknownFrequencyError):
            project_many(schedules, [], clock=NOW)

    def test_invalid_schedule_skipped_when_asked(self):
        schedules = [_schedule(id=1), _schedule(id=2, frequency="HOURLY")]
        merged = list(project_many(schedules, [], horizon_end=date(2024, 1, 31), clock=NOW, skip_invalid=True))
        assert {occ.schedule_id for occ in merged} == {1}
