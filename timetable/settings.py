"""Settings store: the current settings snapshot plus change notification."""

import json
import logging
from dataclasses import fields, replace
from pathlib import Path
from typing import Any, Callable, Optional, Union

from .models import CustomPeriod, ScheduleSettings
from .parsing import settings_from_record, settings_to_record

logger = logging.getLogger(__name__)

SettingsListener = Callable[[ScheduleSettings], None]

_SETTINGS_FIELDS = frozenset(f.name for f in fields(ScheduleSettings))


class SettingsStore:
    """Holds the user's schedule settings.

    Snapshots are immutable; every mutation swaps in a new snapshot, saves it
    when a path is configured and notifies subscribers with it.
    """

    def __init__(
        self,
        initial: Optional[ScheduleSettings] = None,
        path: Optional[Union[str, Path]] = None
    ) -> None:
        """Initialize the store.

        Args:
            initial: Starting snapshot (defaults to empty settings).
            path: Optional JSON file used to persist the settings.
        """
        self._defaults = initial or ScheduleSettings()
        self._settings = self._defaults
        self._path = Path(path) if path else None
        self._listeners: list[SettingsListener] = []

    def snapshot(self) -> ScheduleSettings:
        return self._settings

    def subscribe(self, listener: SettingsListener) -> Callable[[], None]:
        """Register ``listener`` and return a function that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _commit(self, settings: ScheduleSettings) -> ScheduleSettings:
        self._settings = settings
        self.save()
        for listener in list(self._listeners):
            listener(settings)
        return settings

    def update(self, **changes: Any) -> ScheduleSettings:
        """Replace the given fields and return the new snapshot.

        Raises:
            TypeError: If a field name is unknown.
        """
        unknown = set(changes) - _SETTINGS_FIELDS
        if unknown:
            raise TypeError(f"Unknown settings field(s): {', '.join(sorted(unknown))}")
        if "custom_periods" in changes:
            changes["custom_periods"] = tuple(changes["custom_periods"])
        return self._commit(replace(self._settings, **changes))

    def add_custom_period(self, period: CustomPeriod) -> ScheduleSettings:
        return self.update(custom_periods=self._settings.custom_periods + (period,))

    def update_custom_period(self, period_id: str, **changes: Any) -> bool:
        """Edit one custom period in place; returns False if it is unknown."""
        periods = list(self._settings.custom_periods)
        for index, period in enumerate(periods):
            if period.period_id == period_id:
                periods[index] = replace(period, **changes)
                self.update(custom_periods=periods)
                return True
        return False

    def delete_custom_period(self, period_id: str) -> ScheduleSettings:
        return self.update(
            custom_periods=[p for p in self._settings.custom_periods if p.period_id != period_id]
        )

    def reset(self) -> ScheduleSettings:
        return self._commit(self._defaults)

    def load(self) -> ScheduleSettings:
        """Load persisted settings, keeping the current ones if there are none."""
        if self._path is None or not self._path.exists():
            return self._settings
        try:
            record = json.loads(self._path.read_text(encoding="utf-8"))
            settings = settings_from_record(record)
        except (OSError, ValueError, AttributeError) as e:
            logger.warning("Cannot load settings from %s, keeping defaults: %s", self._path, e)
            return self._settings
        return self._commit(settings)

    def save(self) -> None:
        if self._path is None:
            return
        self._path.write_text(
            json.dumps(settings_to_record(self._settings), ensure_ascii=False, indent=2),
            encoding="utf-8",
        )
