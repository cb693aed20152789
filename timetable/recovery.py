"""Registry of recovery days (calendar-date timetable overrides)."""

import logging
from datetime import date, datetime, timedelta
from typing import Any, Iterable, Iterator, Optional

from .models import RecoveryDay
from .parsing import load_recovery_days

logger = logging.getLogger(__name__)


class RecoveryDayRegistry:
    """Read-only lookup of recovery days by date and group.

    Entries keep their insertion order; when several active entries match
    the same date and group, the first one wins.
    """

    def __init__(self, days: Iterable[RecoveryDay] = ()) -> None:
        self._days: tuple[RecoveryDay, ...] = tuple(days)
        self._by_date: dict[date, list[RecoveryDay]] = {}
        for day in self._days:
            if day.is_active:
                self._by_date.setdefault(day.date, []).append(day)

    @classmethod
    def from_records(cls, records: Iterable[dict[str, Any]]) -> "RecoveryDayRegistry":
        """Build a registry from raw records, skipping malformed ones."""
        return cls(load_recovery_days(records))

    def __iter__(self) -> Iterator[RecoveryDay]:
        return iter(self._days)

    def __len__(self) -> int:
        return len(self._days)

    def find_override(self, day: date, group_id: str) -> Optional[RecoveryDay]:
        """Return the active recovery day for ``day`` that applies to ``group_id``.

        Args:
            day: Calendar date to look up.
            group_id: The user's selected group id.

        Returns:
            The matching recovery day, or None when the date is not overridden.
        """
        if isinstance(day, datetime):
            day = day.date()

        matches = [rd for rd in self._by_date.get(day, ()) if rd.applies_to(group_id)]
        if not matches:
            return None
        if len(matches) > 1:
            logger.warning(
                "%d recovery days target %s for group %r; using the first (%s)",
                len(matches), day, group_id, matches[0].replaced_weekday.name.lower(),
            )
        return matches[0]

    def overrides_between(self, start: date, end: date, group_id: str) -> list[RecoveryDay]:
        """Applicable overrides for each date in ``[start, end]``, in date order."""
        found: list[RecoveryDay] = []
        current = start
        while current <= end:
            override = self.find_override(current, group_id)
            if override is not None:
                found.append(override)
            current += timedelta(days=1)
        return found
