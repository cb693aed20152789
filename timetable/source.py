"""Timetable data sources: the upstream API and bundled JSON files."""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Union

import httpx

from .config import EngineConfig
from .errors import SourceUnavailableError, TimetableDataError
from .models import RecoveryDay, WeeklyPeriod, Weekday
from .parsing import (
    load_periods,
    load_recovery_days,
    parse_group,
    parse_parity,
    parse_time,
    parse_weekday,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TimetableData:
    """Immutable snapshot of the timetable for one session."""

    periods: tuple[WeeklyPeriod, ...] = ()
    recovery_days: tuple[RecoveryDay, ...] = ()


def _name_of(item: dict[str, Any], key: str) -> str:
    value = item.get(key) or {}
    return str(value.get("name", "")) if isinstance(value, dict) else ""


def _period_times(
    payload: dict[str, Any],
    period_times: Optional[dict[str, Any]],
    weekday: Weekday,
    number: int
) -> tuple[str, str]:
    """Look up start/end of period ``number`` (1-based) on ``weekday``.

    The per-weekday table takes precedence over the payload's generic list.
    """
    if period_times:
        for entry in period_times.get(weekday.name.lower(), ()):
            if entry.get("period") == number - 1:
                return entry["starttime"], entry["endtime"]

    periods = payload.get("periods") or []
    if not 1 <= number <= len(periods):
        raise TimetableDataError(f"No times known for period {number}")
    return periods[number - 1]["starttime"], periods[number - 1]["endtime"]


def decode_schedule_payload(
    payload: dict[str, Any],
    period_times: Optional[dict[str, Any]] = None
) -> list[WeeklyPeriod]:
    """Convert the upstream timetable response into weekly periods.

    Args:
        payload: Response of the timetable endpoint, with a ``data`` mapping
            of day name -> period number -> ``both``/``par``/``impar`` lists
            and a ``periods`` list of default period times.
        period_times: Optional per-weekday period times table.

    Returns:
        Decoded periods. Malformed items and non school-day keys are skipped.
    """
    periods: list[WeeklyPeriod] = []
    for day_key, slots in (payload.get("data") or {}).items():
        try:
            weekday = parse_weekday(day_key)
        except TimetableDataError:
            logger.debug("Ignoring non-weekday key %r in timetable payload", day_key)
            continue
        if weekday.is_weekend:
            continue

        for number_key, buckets in (slots or {}).items():
            for bucket, items in (buckets or {}).items():
                for item in items or ():
                    try:
                        number = int(number_key)
                        start, end = _period_times(payload, period_times, weekday, number)
                        periods.append(WeeklyPeriod(
                            weekday=weekday,
                            start_time=parse_time(start),
                            end_time=parse_time(end),
                            subject_name=_name_of(item, "subjectid") or "Unknown",
                            teacher_name=_name_of(item, "teacherids"),
                            room_number=_name_of(item, "classroomids"),
                            parity=parse_parity(bucket),
                            group=parse_group(_name_of(item, "groupids")),
                            ordinal=number,
                            period_id=str(number),
                        ))
                    except (TimetableDataError, ValueError, KeyError, TypeError, AttributeError) as e:
                        logger.warning(
                            "Skipping invalid %s period %s item: %s", weekday.name.lower(), number_key, e
                        )
    return periods


def load_bundle(path: Union[str, Path]) -> TimetableData:
    """Read a bundled timetable file.

    The file holds ``{"periods": [...], "recovery_days": [...]}`` with flat
    records; malformed records are skipped.

    Raises:
        TimetableDataError: If the file is missing or is not valid JSON.
    """
    try:
        bundle = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise TimetableDataError(f"Cannot read timetable bundle {path}: {e}") from e
    if not isinstance(bundle, dict):
        raise TimetableDataError(f"Timetable bundle {path} must contain a JSON object")

    return TimetableData(
        periods=tuple(load_periods(bundle.get("periods") or [])),
        recovery_days=tuple(load_recovery_days(bundle.get("recovery_days") or bundle.get("recoveryDays") or [])),
    )


class TimetableClient:
    """HTTP client for the timetable API and its companion service."""

    def __init__(self, config: Optional[EngineConfig] = None, transport: Optional[httpx.BaseTransport] = None) -> None:
        """Initialize the client.

        Args:
            config: Engine configuration with base URLs and timeout.
            transport: Optional httpx transport, used to stub the network.
        """
        self._config = config or EngineConfig()
        self._transport = transport

    def _get(self, url: str, params: Optional[dict[str, str]] = None) -> Any:
        try:
            with httpx.Client(timeout=self._config.request_timeout, transport=self._transport) as client:
                response = client.get(url, params=params)
                response.raise_for_status()
                return response.json()
        except httpx.TimeoutException as e:
            raise SourceUnavailableError(
                f"Request to {url} timed out after {self._config.request_timeout} seconds"
            ) from e
        except httpx.HTTPStatusError as e:
            raise SourceUnavailableError(f"HTTP error from {url}: {e.response.status_code}") from e
        except (httpx.HTTPError, ValueError) as e:
            raise SourceUnavailableError(f"Error calling {url}: {e}") from e

    def fetch_groups(self) -> list[dict[str, Any]]:
        return self._get(f"{self._config.api_base_url}/grupe")

    def fetch_schedule(self, group_id: str) -> dict[str, Any]:
        return self._get(f"{self._config.api_base_url}/orar", params={"_id": group_id, "tip": "class"})

    def fetch_period_times(self) -> dict[str, Any]:
        return self._get(f"{self._config.aux_api_base_url}/schedule")

    def fetch_recovery_days(self) -> list[dict[str, Any]]:
        return self._get(f"{self._config.aux_api_base_url}/recovery-days")

    def find_group_id(self, name: str) -> Optional[str]:
        """Return the id of the group called ``name``, or None."""
        for group in self.fetch_groups():
            if group.get("name") == name:
                return group.get("_id")
        return None

    def fetch_timetable(self, group_id: str) -> TimetableData:
        """Fetch and decode the full timetable of ``group_id``.

        Period times and recovery days are optional: when their service is
        unavailable the default period times and no overrides are used.

        Raises:
            SourceUnavailableError: If the timetable itself cannot be fetched.
        """
        payload = self.fetch_schedule(group_id)

        try:
            period_times = self.fetch_period_times()
        except SourceUnavailableError as e:
            logger.warning("Period times unavailable, using defaults: %s", e)
            period_times = None

        try:
            recovery_records = self.fetch_recovery_days()
        except SourceUnavailableError as e:
            logger.warning("Recovery days unavailable: %s", e)
            recovery_records = []

        return TimetableData(
            periods=tuple(decode_schedule_payload(payload, period_times)),
            recovery_days=tuple(load_recovery_days(recovery_records)),
        )
