"""Exceptions raised by the timetable engine."""


class TimetableError(Exception):
    """Base class for all timetable engine errors."""


class TimetableDataError(TimetableError, ValueError):
    """A source record is malformed (bad date, time, weekday, ...)."""


class SourceUnavailableError(TimetableError):
    """Timetable data could not be fetched from the upstream API."""


class AssignmentStoreUnavailable(TimetableError):
    """The assignment store cannot be read or written."""
