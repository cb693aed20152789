"""Schedule resolution: the definitive list of classes for a calendar date."""

import logging
from datetime import date, datetime, timedelta
from typing import Optional

from .assignments import AssignmentJoin, AssignmentStore
from .models import (
    GroupTag,
    Parity,
    RecoveryDay,
    ResolvedScheduleItem,
    ScheduleSettings,
    WeeklyPeriod,
    Weekday,
)
from .parity import ParityCalculator, monday_of
from .recovery import RecoveryDayRegistry
from .repository import PeriodRepository
from .source import TimetableData

logger = logging.getLogger(__name__)


class ScheduleResolver:
    """Computes the ordered schedule of one date for a settings snapshot.

    The resolver only reads its collaborators, so one instance can serve any
    number of independent ``resolve`` calls. Callers pass a fresh settings
    snapshot on every call.
    """

    def __init__(
        self,
        repository: PeriodRepository,
        registry: RecoveryDayRegistry,
        parity: ParityCalculator,
        assignment_join: Optional[AssignmentJoin] = None
    ) -> None:
        self._repository = repository
        self._registry = registry
        self._parity = parity
        self._assignment_join = assignment_join

    @classmethod
    def from_data(
        cls,
        data: TimetableData,
        epoch: date,
        assignment_store: Optional[AssignmentStore] = None
    ) -> "ScheduleResolver":
        """Build a resolver over a timetable snapshot."""
        return cls(
            PeriodRepository(data.periods),
            RecoveryDayRegistry(data.recovery_days),
            ParityCalculator(epoch),
            AssignmentJoin(assignment_store) if assignment_store is not None else None,
        )

    @property
    def parity(self) -> ParityCalculator:
        return self._parity

    @property
    def registry(self) -> RecoveryDayRegistry:
        return self._registry

    def resolve(
        self,
        day: date,
        settings: ScheduleSettings,
        annotate: bool = True
    ) -> list[ResolvedScheduleItem]:
        """Resolve the classes held on ``day``.

        Args:
            day: Calendar date (a ``datetime`` is reduced to its date).
            settings: Snapshot of the user's settings.
            annotate: Attach assignment counts when an assignment join is
                configured. Without it every count is 0.

        Returns:
            Items sorted by start time, then ordinal, then subject name. An
            empty list means there are no classes that day.

        Raises:
            TypeError: If ``day`` is not a date.
        """
        day = _as_date(day)

        override = self._registry.find_override(day, settings.selected_group_id)
        if override is not None:
            weekday = override.replaced_weekday
        else:
            weekday = Weekday.of(day)
            if weekday.is_weekend:
                return []

        candidates = self._repository.periods_for(weekday, settings.custom_periods)
        is_odd = self._parity.is_odd_week(day)

        items = [
            self._to_item(period, day, override)
            for period in candidates
            if _parity_matches(period.parity, is_odd) and _group_matches(period.group, settings.subgroup)
        ]
        items.sort(key=lambda item: item.sort_key)

        if annotate and self._assignment_join is not None:
            items = self._assignment_join.annotate(items, day)
        return items

    def resolve_week(self, day: date, settings: ScheduleSettings) -> dict[date, list[ResolvedScheduleItem]]:
        """Resolve every school day of the week containing ``day``.

        Saturday and Sunday are included only when a recovery day applies
        to them.

        Returns:
            Mapping of date to its resolved items, in date order.
        """
        monday = monday_of(_as_date(day))
        week: dict[date, list[ResolvedScheduleItem]] = {}
        for offset in range(7):
            current = monday + timedelta(days=offset)
            if Weekday.of(current).is_weekend and self._registry.find_override(
                current, settings.selected_group_id
            ) is None:
                continue
            week[current] = self.resolve(current, settings)
        return week

    def resolve_range(self, start: date, end: date, settings: ScheduleSettings) -> dict[date, list[ResolvedScheduleItem]]:
        """Resolve every date in ``[start, end]`` that has at least one class."""
        start, end = _as_date(start), _as_date(end)
        if start > end:
            raise ValueError("Start date must not be after end date")

        days: dict[date, list[ResolvedScheduleItem]] = {}
        current = start
        while current <= end:
            items = self.resolve(current, settings)
            if items:
                days[current] = items
            current += timedelta(days=1)
        logger.debug("Resolved %d day(s) with classes between %s and %s", len(days), start, end)
        return days

    @staticmethod
    def _to_item(period: WeeklyPeriod, day: date, override: Optional[RecoveryDay]) -> ResolvedScheduleItem:
        return ResolvedScheduleItem(
            date=day,
            start_time=period.start_time,
            end_time=period.end_time,
            subject_name=period.subject_name,
            teacher_name=period.teacher_name,
            room_number=period.room_number,
            group=period.group,
            parity=period.parity,
            ordinal=period.ordinal,
            period_id=period.period_id,
            is_custom=period.is_custom,
            color=period.color,
            effective_parity_matched=period.parity is not Parity.ALL,
            is_recovery_projection=override is not None,
            recovery_reason=override.reason if override else "",
            replaced_weekday=override.replaced_weekday if override else None,
        )


def _as_date(value: date) -> date:
    if isinstance(value, datetime):
        return value.date()
    if not isinstance(value, date):
        raise TypeError(f"Expected a date, got {type(value).__name__}")
    return value


def _parity_matches(parity: Parity, is_odd: bool) -> bool:
    if parity is Parity.ALL:
        return True
    return (parity is Parity.ODD) == is_odd


def _group_matches(group: GroupTag, subgroup: Optional[GroupTag]) -> bool:
    # Without a subgroup selection only whole-group periods are shown
    return group is GroupTag.WHOLE or group is subgroup
