"""Base weekly timetable merged with user-authored custom periods."""

import logging
import re
from typing import Any, Iterable, Sequence

from .models import CustomPeriod, Subject, WeeklyPeriod, Weekday
from .parsing import load_periods

logger = logging.getLogger(__name__)


class PeriodRepository:
    """Holds the recurring periods of one group's timetable.

    The repository is immutable for the session; refreshing the timetable
    means building a new repository.
    """

    def __init__(self, periods: Iterable[WeeklyPeriod] = ()) -> None:
        self._by_weekday: dict[Weekday, list[WeeklyPeriod]] = {}
        for period in periods:
            self._by_weekday.setdefault(Weekday(period.weekday), []).append(period)

    @classmethod
    def from_records(cls, records: Iterable[dict[str, Any]]) -> "PeriodRepository":
        """Build a repository from raw records, skipping malformed ones."""
        return cls(load_periods(records))

    def __len__(self) -> int:
        return sum(len(periods) for periods in self._by_weekday.values())

    def base_periods(self, weekday: Weekday) -> list[WeeklyPeriod]:
        return list(self._by_weekday.get(Weekday(weekday), ()))

    def periods_for(
        self,
        weekday: Weekday,
        custom_periods: Sequence[CustomPeriod] = ()
    ) -> list[WeeklyPeriod]:
        """Return the candidate periods for ``weekday``.

        Custom periods targeting the same weekday replace every base period
        sharing their (weekday, start time, group) key; the rest are
        appended. Among custom periods with the same key the later one wins.

        Args:
            weekday: School day to look up.
            custom_periods: The user's custom periods from the settings.

        Returns:
            Base and custom periods in no particular order.
        """
        weekday = Weekday(weekday)
        if weekday.is_weekend:
            return []

        custom_by_key: dict[tuple, WeeklyPeriod] = {}
        for custom in custom_periods:
            for period in custom.expand():
                if period.weekday == weekday:
                    custom_by_key[period.key] = period

        merged = [p for p in self._by_weekday.get(weekday, ()) if p.key not in custom_by_key]
        dropped = len(self._by_weekday.get(weekday, ())) - len(merged)
        if dropped:
            logger.debug("%d base period(s) on %s replaced by custom periods", dropped, weekday.name.lower())

        merged.extend(custom_by_key.values())
        return merged

    def subjects(self, custom_periods: Sequence[CustomPeriod] = ()) -> list[Subject]:
        """Return the de-duplicated subject catalogue, base subjects first."""
        catalogue: dict[str, Subject] = {}
        for weekday in sorted(self._by_weekday):
            for period in self._by_weekday[weekday]:
                subject_id = "subject_" + re.sub(r"\s+", "_", period.subject_name).lower()
                catalogue.setdefault(subject_id, Subject(id=subject_id, name=period.subject_name))

        for custom in custom_periods:
            custom_id = f"custom_{custom.period_id}"
            if custom.name and custom_id not in catalogue:
                catalogue[custom_id] = Subject(id=custom_id, name=custom.name, is_custom=True)

        return list(catalogue.values())
