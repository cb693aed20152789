"""Builders shared by the timetable tests."""
from datetime import date, time

from timetable.models import WeeklyPeriod, Weekday

EPOCH = date(2024, 9, 2)


def make_period(
    weekday: Weekday = Weekday.MONDAY,
    start: str = "09:00",
    end: str = "10:00",
    subject: str = "Math",
    **kwargs,
) -> WeeklyPeriod:
    """Build a period from short HH:MM strings."""
    h1, m1 = map(int, start.split(":"))
    h2, m2 = map(int, end.split(":"))
    return WeeklyPeriod(
        weekday=weekday,
        start_time=time(h1, m1),
        end_time=time(h2, m2),
        subject_name=subject,
        **kwargs,
    )
