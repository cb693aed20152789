"""Shared fixtures for the timetable tests."""
from datetime import date

import pytest

from timetable.models import (
    GroupTag,
    Parity,
    RecoveryDay,
    ScheduleSettings,
    WeeklyPeriod,
    Weekday,
)
from timetable.parity import ParityCalculator
from timetable.recovery import RecoveryDayRegistry
from timetable.repository import PeriodRepository
from timetable.resolver import ScheduleResolver

from .helpers import EPOCH, make_period


@pytest.fixture
def parity() -> ParityCalculator:
    return ParityCalculator(EPOCH)


@pytest.fixture
def base_periods() -> list[WeeklyPeriod]:
    return [
        make_period(Weekday.MONDAY, "09:00", "10:00", "Math", ordinal=1, period_id="1"),
        make_period(Weekday.MONDAY, "10:15", "11:00", "Physics", ordinal=2, period_id="2",
                    parity=Parity.ODD),
        make_period(Weekday.MONDAY, "10:15", "11:00", "Chemistry", ordinal=2, period_id="2",
                    parity=Parity.EVEN),
        make_period(Weekday.MONDAY, "11:15", "12:00", "Lab A", ordinal=3, period_id="3",
                    group=GroupTag.SUBGROUP_1),
        make_period(Weekday.MONDAY, "11:15", "12:00", "Lab B", ordinal=3, period_id="3",
                    group=GroupTag.SUBGROUP_2),
        make_period(Weekday.TUESDAY, "08:00", "09:30", "History", ordinal=1, period_id="1"),
        make_period(Weekday.FRIDAY, "12:00", "13:30", "Sport", ordinal=4, period_id="4"),
    ]


@pytest.fixture
def recovery_days() -> list[RecoveryDay]:
    return [
        RecoveryDay(date=date(2024, 10, 19), replaced_weekday=Weekday.MONDAY, reason="Holiday swap"),
        RecoveryDay(date=date(2024, 10, 26), replaced_weekday=Weekday.FRIDAY, scope_group="g-other"),
        RecoveryDay(date=date(2024, 11, 2), replaced_weekday=Weekday.TUESDAY, is_active=False),
    ]


@pytest.fixture
def resolver(base_periods, recovery_days, parity) -> ScheduleResolver:
    return ScheduleResolver(
        PeriodRepository(base_periods),
        RecoveryDayRegistry(recovery_days),
        parity,
    )


@pytest.fixture
def settings() -> ScheduleSettings:
    return ScheduleSettings(selected_group_id="g-1", subgroup=GroupTag.SUBGROUP_2)
