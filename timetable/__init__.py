"""Timetable module for resolving a student's class schedule by date."""

from .assignments import AssignmentJoin, AssignmentStore, InMemoryAssignmentStore, JsonFileAssignmentStore
from .config import EngineConfig
from .errors import (
    AssignmentStoreUnavailable,
    SourceUnavailableError,
    TimetableDataError,
    TimetableError,
)
from .models import (
    Assignment,
    CustomPeriod,
    GroupTag,
    Parity,
    RecoveryDay,
    ResolvedScheduleItem,
    ScheduleSettings,
    ScheduleView,
    Subject,
    WeeklyPeriod,
    Weekday,
)
from .parity import ParityCalculator
from .recovery import RecoveryDayRegistry
from .repository import PeriodRepository
from .resolver import ScheduleResolver
from .settings import SettingsStore
from .source import TimetableClient, TimetableData, decode_schedule_payload, load_bundle

__all__ = [
    "Assignment",
    "AssignmentJoin",
    "AssignmentStore",
    "AssignmentStoreUnavailable",
    "CustomPeriod",
    "EngineConfig",
    "GroupTag",
    "InMemoryAssignmentStore",
    "JsonFileAssignmentStore",
    "Parity",
    "ParityCalculator",
    "PeriodRepository",
    "RecoveryDay",
    "RecoveryDayRegistry",
    "ResolvedScheduleItem",
    "ScheduleResolver",
    "ScheduleSettings",
    "ScheduleView",
    "SettingsStore",
    "SourceUnavailableError",
    "Subject",
    "TimetableClient",
    "TimetableData",
    "TimetableDataError",
    "TimetableError",
    "WeeklyPeriod",
    "Weekday",
    "decode_schedule_payload",
    "load_bundle",
]
