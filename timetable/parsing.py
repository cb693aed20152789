"""Conversion of raw source records into the typed timetable model.

All date/time parsing happens here so that malformed data is handled in one
place: single-record parsers raise ``TimetableDataError``, the ``load_*``
helpers skip the offending record, log it and keep going.
"""

import logging
import re
from datetime import date, datetime, time
from typing import Any, Callable, Iterable, Optional, TypeVar

from .errors import TimetableDataError
from .models import (
    CustomPeriod,
    GroupTag,
    Parity,
    RecoveryDay,
    ScheduleSettings,
    ScheduleView,
    WeeklyPeriod,
    Weekday,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

_TIME_RE = re.compile(r"^(\d{1,2}):(\d{2})$")

_PARITY_ALIASES = {
    "all": Parity.ALL,
    "both": Parity.ALL,
    "odd": Parity.ODD,
    "impar": Parity.ODD,
    "even": Parity.EVEN,
    "par": Parity.EVEN,
}

# Spellings of "entire class" seen in upstream data, compared case-insensitively
_WHOLE_GROUP_MARKERS = ("intreag", "întreag", "whole", "class", "entire")


def parse_time(value: str) -> time:
    """Parse an ``HH:MM`` (or ``H:MM``) 24-hour time string.

    Args:
        value: Time string like "08:00" or "8:00".

    Returns:
        Time object.

    Raises:
        TimetableDataError: If the string is not a valid time of day.
    """
    if isinstance(value, time):
        return value
    match = _TIME_RE.match(str(value).strip())
    if not match:
        raise TimetableDataError(f"Cannot parse time: {value!r}")

    hour, minute = map(int, match.groups())
    try:
        return time(hour, minute)
    except ValueError as e:
        raise TimetableDataError(f"Cannot parse time: {value!r}") from e


def parse_date(value: str) -> date:
    """Parse a ``YYYY-MM-DD`` date string."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.strptime(str(value).strip(), "%Y-%m-%d").date()
    except ValueError as e:
        raise TimetableDataError(f"Cannot parse date: {value!r}. Expected YYYY-MM-DD.") from e


def parse_weekday(value: Any) -> Weekday:
    """Parse an English day name ("monday", "Tue") or an index 0-6."""
    if isinstance(value, Weekday):
        return value
    if isinstance(value, int) and not isinstance(value, bool):
        if 0 <= value <= 6:
            return Weekday(value)
        raise TimetableDataError(f"Weekday index out of range: {value}")

    text = str(value).strip().lower()
    for day in Weekday:
        name = day.name.lower()
        if text == name or (len(text) >= 3 and name.startswith(text)):
            return day
    raise TimetableDataError(f"Unknown weekday: {value!r}")


def parse_parity(value: Any) -> Parity:
    if isinstance(value, Parity):
        return value
    if value is None or str(value).strip() == "":
        return Parity.ALL
    try:
        return _PARITY_ALIASES[str(value).strip().lower()]
    except KeyError:
        raise TimetableDataError(f"Unknown week parity: {value!r}") from None


def parse_group(value: Any) -> GroupTag:
    """Normalise a group label from any source onto ``GroupTag``.

    Accepts "Subgroup 1"/"Subgroup 2", the upstream "Grupa 1"/"Grupa 2", and
    the various spellings of "entire class". Blank means the whole group.
    """
    if isinstance(value, GroupTag):
        return value
    text = "" if value is None else str(value).strip()
    if not text:
        return GroupTag.WHOLE

    lowered = text.lower()
    if re.search(r"(grupa|subgroup)\s*1\b", lowered) or lowered == "1":
        return GroupTag.SUBGROUP_1
    if re.search(r"(grupa|subgroup)\s*2\b", lowered) or lowered == "2":
        return GroupTag.SUBGROUP_2
    if any(marker in lowered for marker in _WHOLE_GROUP_MARKERS):
        return GroupTag.WHOLE
    raise TimetableDataError(f"Unknown group label: {value!r}")


def parse_subgroup(value: Any) -> Optional[GroupTag]:
    """Parse the user's subgroup selection; blank means none."""
    if value is None or str(value).strip() == "":
        return None
    group = parse_group(value)
    return None if group is GroupTag.WHOLE else group


def _pick(record: dict[str, Any], *keys: str, default: Any = None) -> Any:
    """Return the first present key, so snake_case and API camelCase both work."""
    for key in keys:
        if key in record and record[key] is not None:
            return record[key]
    return default


def _require(record: dict[str, Any], *keys: str) -> Any:
    value = _pick(record, *keys)
    if value is None or (isinstance(value, str) and not value.strip()):
        raise TimetableDataError(f"Missing field {keys[0]!r} in record {record!r}")
    return value


def _parse_int(value: Any, name: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise TimetableDataError(f"Field {name!r} must be an integer, got {value!r}") from None


def _parse_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return bool(value)


def _build(factory: Callable[..., T], **kwargs: Any) -> T:
    # Model invariants (start < end, school day) surface as data errors here
    try:
        return factory(**kwargs)
    except ValueError as e:
        raise TimetableDataError(str(e)) from e


def period_from_record(record: dict[str, Any]) -> WeeklyPeriod:
    """Build a ``WeeklyPeriod`` from a flat record.

    Args:
        record: Mapping with weekday, start/end time, subject and optional
            teacher, room, parity, group, ordinal and id fields.

    Returns:
        Parsed period.

    Raises:
        TimetableDataError: If any field is missing or malformed.
    """
    ordinal = _parse_int(_pick(record, "ordinal", "period", default=0), "ordinal")
    return _build(
        WeeklyPeriod,
        weekday=parse_weekday(_require(record, "weekday", "day")),
        start_time=parse_time(_require(record, "start_time", "startTime", "starttime")),
        end_time=parse_time(_require(record, "end_time", "endTime", "endtime")),
        subject_name=str(_require(record, "subject_name", "subjectName", "subject")),
        teacher_name=str(_pick(record, "teacher_name", "teacherName", "teacher", default="")),
        room_number=str(_pick(record, "room_number", "roomNumber", "room", default="")),
        parity=parse_parity(_pick(record, "parity", "weeks")),
        group=parse_group(_pick(record, "group")),
        ordinal=ordinal,
        period_id=str(_pick(record, "period_id", "periodId", "_id", default=ordinal)),
    )


def recovery_day_from_record(record: dict[str, Any]) -> RecoveryDay:
    """Build a ``RecoveryDay`` from a flat or upstream API record."""
    return _build(
        RecoveryDay,
        date=parse_date(_require(record, "date")),
        replaced_weekday=parse_weekday(_require(record, "replaced_weekday", "replacedDay")),
        reason=str(_pick(record, "reason", default="")),
        is_active=_parse_bool(_pick(record, "is_active", "isActive", default=True)),
        scope_group=str(_pick(record, "scope_group", "groupId", default="")).strip(),
    )


def custom_period_from_record(record: dict[str, Any]) -> CustomPeriod:
    """Build a ``CustomPeriod`` from a settings record.

    Upstream days are numbered 1-5 for Monday-Friday; names and 0-based
    indexes are accepted too when stored by this package.
    """
    raw_days = _pick(record, "days_of_week", "daysOfWeek", default=()) or ()
    days: list[Weekday] = []
    for raw in raw_days:
        if isinstance(raw, int) and not isinstance(raw, bool) and "daysOfWeek" in record:
            if not 1 <= raw <= 5:
                raise TimetableDataError(f"Custom period day out of range: {raw}")
            days.append(Weekday(raw - 1))
        else:
            days.append(parse_weekday(raw))

    color = _pick(record, "color")
    return _build(
        CustomPeriod,
        period_id=str(_require(record, "period_id", "_id", "id")),
        start_time=parse_time(_require(record, "start_time", "starttime")),
        end_time=parse_time(_require(record, "end_time", "endtime")),
        name=str(_pick(record, "name", default="")),
        days_of_week=tuple(days),
        is_enabled=_parse_bool(_pick(record, "is_enabled", "isEnabled", default=True)),
        color=str(color) if color else None,
        group=parse_group(_pick(record, "group")),
        parity=parse_parity(_pick(record, "parity")),
        teacher_name=str(_pick(record, "teacher_name", default="")),
        room_number=str(_pick(record, "room_number", default="")),
        ordinal=_parse_int(_pick(record, "ordinal", default=0), "ordinal"),
    )


def _load_all(records: Iterable[dict[str, Any]], parse: Callable[[dict[str, Any]], T], kind: str) -> list[T]:
    try:
        records = iter(records)
    except TypeError as e:
        raise TimetableDataError(f"Expected a list of {kind} records, got {type(records).__name__}") from e

    parsed: list[T] = []
    for index, record in enumerate(records):
        try:
            parsed.append(parse(record))
        except (TimetableDataError, AttributeError, TypeError) as e:
            logger.warning("Skipping invalid %s record #%d: %s", kind, index, e)
    return parsed


def load_periods(records: Iterable[dict[str, Any]]) -> list[WeeklyPeriod]:
    return _load_all(records, period_from_record, "period")


def load_recovery_days(records: Iterable[dict[str, Any]]) -> list[RecoveryDay]:
    return _load_all(records, recovery_day_from_record, "recovery day")


def load_custom_periods(records: Iterable[dict[str, Any]]) -> list[CustomPeriod]:
    return _load_all(records, custom_period_from_record, "custom period")


def _format_time(value: time) -> str:
    return value.strftime("%H:%M")


def custom_period_to_record(period: CustomPeriod) -> dict[str, Any]:
    return {
        "period_id": period.period_id,
        "name": period.name,
        "start_time": _format_time(period.start_time),
        "end_time": _format_time(period.end_time),
        "days_of_week": [Weekday(day).name.lower() for day in period.days_of_week],
        "is_enabled": period.is_enabled,
        "color": period.color,
        "group": period.group.value,
        "parity": period.parity.value,
        "teacher_name": period.teacher_name,
        "room_number": period.room_number,
        "ordinal": period.ordinal,
    }


def settings_to_record(settings: ScheduleSettings) -> dict[str, Any]:
    return {
        "selected_group_id": settings.selected_group_id,
        "selected_group_name": settings.selected_group_name,
        "subgroup": settings.subgroup.value if settings.subgroup else None,
        "custom_periods": [custom_period_to_record(p) for p in settings.custom_periods],
        "schedule_view": settings.schedule_view.value,
    }


def settings_from_record(record: dict[str, Any]) -> ScheduleSettings:
    """Build settings from a persisted record; bad custom periods are skipped."""
    view = str(_pick(record, "schedule_view", "scheduleView", default=ScheduleView.DAY.value))
    try:
        schedule_view = ScheduleView(view)
    except ValueError:
        raise TimetableDataError(f"Unknown schedule view: {view!r}") from None

    return ScheduleSettings(
        selected_group_id=str(_pick(record, "selected_group_id", "selectedGroupId", default="")),
        selected_group_name=str(_pick(record, "selected_group_name", "selectedGroupName", default="")),
        subgroup=parse_subgroup(_pick(record, "subgroup", "group")),
        custom_periods=tuple(
            load_custom_periods(_pick(record, "custom_periods", "customPeriods", default=[]))
        ),
        schedule_view=schedule_view,
    )
