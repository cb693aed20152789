"""Tests for the period repository and custom period merging."""
from datetime import time

from timetable.models import CustomPeriod, GroupTag, Weekday
from timetable.repository import PeriodRepository

from .helpers import make_period


def test_periods_for_weekday(base_periods) -> None:
    repository = PeriodRepository(base_periods)

    monday = repository.periods_for(Weekday.MONDAY)

    assert len(monday) == 5
    assert all(p.weekday is Weekday.MONDAY for p in monday)
    assert repository.periods_for(Weekday.WEDNESDAY) == []
    assert repository.periods_for(Weekday.SATURDAY) == []


def test_custom_period_replaces_base_on_key_collision() -> None:
    repository = PeriodRepository([make_period(Weekday.MONDAY, "09:00", "10:00", "Math")])
    custom = CustomPeriod(
        period_id="c1",
        name="Robotics",
        start_time=time(9, 0),
        end_time=time(10, 30),
        days_of_week=(Weekday.MONDAY,),
    )

    monday = repository.periods_for(Weekday.MONDAY, [custom])

    assert [p.subject_name for p in monday] == ["Robotics"]
    assert monday[0].is_custom
    assert monday[0].period_id == "c1"


def test_custom_period_with_other_group_is_appended() -> None:
    repository = PeriodRepository([make_period(Weekday.MONDAY, "09:00", "10:00", "Math")])
    custom = CustomPeriod(
        period_id="c1",
        name="Robotics",
        start_time=time(9, 0),
        end_time=time(10, 0),
        days_of_week=(Weekday.MONDAY,),
        group=GroupTag.SUBGROUP_1,
    )

    monday = repository.periods_for(Weekday.MONDAY, [custom])

    assert sorted(p.subject_name for p in monday) == ["Math", "Robotics"]


def test_custom_period_without_days_covers_every_school_day() -> None:
    repository = PeriodRepository()
    custom = CustomPeriod(period_id="c1", start_time=time(17, 0), end_time=time(18, 0))

    for weekday in (Weekday.MONDAY, Weekday.WEDNESDAY, Weekday.FRIDAY):
        periods = repository.periods_for(weekday, [custom])
        assert len(periods) == 1
        assert periods[0].subject_name == "Custom Period"
        assert periods[0].color == "#4CC9F0"
    assert repository.periods_for(Weekday.SUNDAY, [custom]) == []


def test_disabled_custom_period_is_ignored() -> None:
    repository = PeriodRepository([make_period(Weekday.MONDAY, "09:00", "10:00", "Math")])
    custom = CustomPeriod(
        period_id="c1",
        name="Robotics",
        start_time=time(9, 0),
        end_time=time(10, 0),
        is_enabled=False,
    )

    assert [p.subject_name for p in repository.periods_for(Weekday.MONDAY, [custom])] == ["Math"]


def test_later_custom_period_wins_on_same_key() -> None:
    repository = PeriodRepository()
    first = CustomPeriod(period_id="c1", name="First", start_time=time(9, 0), end_time=time(10, 0))
    second = CustomPeriod(period_id="c2", name="Second", start_time=time(9, 0), end_time=time(10, 0))

    periods = repository.periods_for(Weekday.TUESDAY, [first, second])

    assert [p.subject_name for p in periods] == ["Second"]


def test_from_records_skips_malformed_periods() -> None:
    repository = PeriodRepository.from_records([
        {"weekday": "monday", "start_time": "09:00", "end_time": "10:00", "subject_name": "Math"},
        {"weekday": "monday", "start_time": "9h", "end_time": "10:00", "subject_name": "Broken"},
        {"weekday": "saturday", "start_time": "09:00", "end_time": "10:00", "subject_name": "Weekend"},
        {"weekday": "tuesday", "start_time": "11:00", "end_time": "10:00", "subject_name": "Backwards"},
    ])

    assert len(repository) == 1


def test_subject_catalogue(base_periods) -> None:
    repository = PeriodRepository(base_periods + [make_period(Weekday.FRIDAY, "08:00", "09:00", "Math")])
    custom = CustomPeriod(period_id="c1", name="Robotics Club", start_time=time(17, 0), end_time=time(18, 0))

    subjects = repository.subjects([custom])

    names = [s.name for s in subjects]
    assert names.count("Math") == 1
    assert subjects[0].id == "subject_math"
    assert subjects[-1].id == "custom_c1"
    assert subjects[-1].is_custom
