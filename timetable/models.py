"""Data models for the weekly timetable, recovery days and assignments."""

from dataclasses import dataclass, field
from datetime import date, time
from enum import Enum, IntEnum
from typing import Optional


class Weekday(IntEnum):
    """Day of the week, aligned with ``date.weekday()``."""

    MONDAY = 0
    TUESDAY = 1
    WEDNESDAY = 2
    THURSDAY = 3
    FRIDAY = 4
    SATURDAY = 5
    SUNDAY = 6

    @property
    def is_weekend(self) -> bool:
        return self >= Weekday.SATURDAY

    @classmethod
    def of(cls, day: date) -> "Weekday":
        return cls(day.weekday())


SCHOOL_DAYS = tuple(Weekday(i) for i in range(5))


class Parity(str, Enum):
    """Which weeks a period occurs on."""

    ALL = "all"
    ODD = "odd"
    EVEN = "even"


class GroupTag(str, Enum):
    """The cohort a period applies to."""

    WHOLE = "whole"
    SUBGROUP_1 = "Subgroup 1"
    SUBGROUP_2 = "Subgroup 2"


class ScheduleView(str, Enum):
    """Presentation mode of the schedule screen."""

    DAY = "day"
    WEEK = "week"


DEFAULT_CUSTOM_NAME = "Custom Period"
DEFAULT_CUSTOM_COLOR = "#4CC9F0"


@dataclass(frozen=True)
class WeeklyPeriod:
    """A recurring class meeting on a school day."""

    weekday: Weekday
    start_time: time
    end_time: time
    subject_name: str
    teacher_name: str = ""
    room_number: str = ""
    parity: Parity = Parity.ALL
    group: GroupTag = GroupTag.WHOLE
    ordinal: int = 0
    period_id: str = ""
    is_custom: bool = False
    color: Optional[str] = None

    def __post_init__(self) -> None:
        if Weekday(self.weekday).is_weekend:
            raise ValueError(f"Weekday must be Monday-Friday, got {Weekday(self.weekday).name}")
        if self.start_time >= self.end_time:
            raise ValueError("Start time must be before end time")
        if self.ordinal < 0:
            raise ValueError(f"Ordinal must not be negative, got {self.ordinal}")

    @property
    def key(self) -> tuple[Weekday, time, GroupTag]:
        """Identity used when a custom period overrides a base period."""
        return (self.weekday, self.start_time, self.group)


@dataclass(frozen=True)
class CustomPeriod:
    """A user-authored period stored in the schedule settings.

    ``days_of_week`` lists the school days the period is held on; an empty
    tuple means every school day.
    """

    period_id: str
    start_time: time
    end_time: time
    name: str = ""
    days_of_week: tuple[Weekday, ...] = ()
    is_enabled: bool = True
    color: Optional[str] = None
    group: GroupTag = GroupTag.WHOLE
    parity: Parity = Parity.ALL
    teacher_name: str = ""
    room_number: str = ""
    ordinal: int = 0

    def __post_init__(self) -> None:
        if self.start_time >= self.end_time:
            raise ValueError("Start time must be before end time")
        for day in self.days_of_week:
            if Weekday(day).is_weekend:
                raise ValueError(f"Custom periods can only be held Monday-Friday, got {Weekday(day).name}")

    def expand(self) -> list[WeeklyPeriod]:
        """Return one ``WeeklyPeriod`` per school day this entry covers."""
        if not self.is_enabled:
            return []
        days = self.days_of_week or SCHOOL_DAYS
        return [
            WeeklyPeriod(
                weekday=Weekday(day),
                start_time=self.start_time,
                end_time=self.end_time,
                subject_name=self.name or DEFAULT_CUSTOM_NAME,
                teacher_name=self.teacher_name,
                room_number=self.room_number,
                parity=self.parity,
                group=self.group,
                ordinal=self.ordinal,
                period_id=self.period_id,
                is_custom=True,
                color=self.color or DEFAULT_CUSTOM_COLOR,
            )
            for day in days
        ]


@dataclass(frozen=True)
class RecoveryDay:
    """Projects one weekday's timetable onto a concrete calendar date."""

    date: date
    replaced_weekday: Weekday
    reason: str = ""
    is_active: bool = True
    scope_group: str = ""  # blank = all groups

    def __post_init__(self) -> None:
        if Weekday(self.replaced_weekday).is_weekend:
            raise ValueError(
                f"Replaced weekday must be Monday-Friday, got {Weekday(self.replaced_weekday).name}"
            )

    @property
    def is_all_groups(self) -> bool:
        return not self.scope_group.strip()

    def applies_to(self, group_id: str) -> bool:
        return self.is_all_groups or self.scope_group == group_id


@dataclass(frozen=True)
class ScheduleSettings:
    """Immutable snapshot of the user's schedule preferences."""

    selected_group_id: str = ""
    selected_group_name: str = ""
    subgroup: Optional[GroupTag] = None
    custom_periods: tuple[CustomPeriod, ...] = ()
    schedule_view: ScheduleView = ScheduleView.DAY

    def __post_init__(self) -> None:
        if self.subgroup is GroupTag.WHOLE:
            raise ValueError("Subgroup must be one of the two subgroup tags or None")


@dataclass(frozen=True)
class ResolvedScheduleItem:
    """One class meeting on a concrete date."""

    date: date
    start_time: time
    end_time: time
    subject_name: str
    teacher_name: str
    room_number: str
    group: GroupTag
    parity: Parity
    ordinal: int
    period_id: str
    is_custom: bool = False
    color: Optional[str] = None
    effective_parity_matched: bool = False
    assignment_count: int = 0
    is_recovery_projection: bool = False
    recovery_reason: str = ""
    replaced_weekday: Optional[Weekday] = None

    @property
    def sort_key(self) -> tuple[time, int, str]:
        return (self.start_time, self.ordinal, self.subject_name)


@dataclass(frozen=True)
class Subject:
    """Entry of the subject catalogue."""

    id: str
    name: str
    is_custom: bool = False


@dataclass
class Assignment:
    """A piece of coursework due on a given date."""

    id: str
    title: str
    course_code: str
    course_name: str
    due_date: date
    description: str = ""
    is_completed: bool = False
    is_priority: bool = False
    period_id: Optional[str] = None


@dataclass
class AssignmentGroup:
    """Assignments sharing a due date."""

    due_date: date
    assignments: list[Assignment] = field(default_factory=list)
