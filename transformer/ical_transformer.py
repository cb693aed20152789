"""iCalendar transformer for resolved schedule items."""

import hashlib
from datetime import date, datetime
from typing import Mapping, Optional, Sequence
from zoneinfo import ZoneInfo

from icalendar import Calendar, Event

from timetable.config import DEFAULT_TIMEZONE
from timetable.models import ResolvedScheduleItem
from .base import BaseTransformer


class ICalTransformer(BaseTransformer):
    """Transformer that converts resolved schedule days to iCalendar format.

    Every resolved item becomes a single event on its own date, so recovery
    days and week parity are already reflected in the output.
    """
    
    UID_DOMAIN = "timetable.local"
    
    def __init__(self, timezone: str = DEFAULT_TIMEZONE, calendar_name: str = "Schedule") -> None:
        """Initialize the iCalendar transformer.
        
        Args:
            timezone: IANA timezone the class times are expressed in.
            calendar_name: Display name of the generated calendar.
        """
        self._calendar: Optional[Calendar] = None
        self._timezone_name = timezone
        self._timezone = ZoneInfo(timezone)
        self._calendar_name = calendar_name
    
    def _generate_uid(self, item: ResolvedScheduleItem) -> str:
        """Generate a stable identifier for one occurrence.
        
        Args:
            item: The resolved schedule item.
            
        Returns:
            Unique identifier string.
        """
        unique_string = (
            f"{item.date}-{item.start_time}-{item.subject_name}-"
            f"{item.group.value}-{item.period_id}"
        )
        return hashlib.md5(unique_string.encode()).hexdigest() + "@" + self.UID_DOMAIN
    
    @staticmethod
    def _summary(item: ResolvedScheduleItem) -> str:
        summary = item.subject_name
        if item.is_recovery_projection:
            summary = f"[Recovery] {summary}"
        if item.assignment_count:
            summary = f"{summary} ({item.assignment_count} due)"
        return summary
    
    def transform(self, days: Mapping[date, Sequence[ResolvedScheduleItem]]) -> Calendar:
        """Transform resolved schedule days into iCalendar format.
        
        Args:
            days: Resolved items keyed by date.
            
        Returns:
            iCalendar Calendar object.
        """
        self._calendar = Calendar()
        self._calendar.add("prodid", "-//Timetable resolver//timetable-to-ical//EN")
        self._calendar.add("version", "2.0")
        self._calendar.add("calscale", "GREGORIAN")
        self._calendar.add("method", "PUBLISH")
        self._calendar.add("x-wr-calname", self._calendar_name)
        self._calendar.add("x-wr-timezone", self._timezone_name)
        
        stamp = datetime.now(self._timezone)
        for day in sorted(days):
            for item in days[day]:
                event = Event()
                event.add("uid", self._generate_uid(item))
                event.add("dtstart", datetime.combine(item.date, item.start_time, tzinfo=self._timezone))
                event.add("dtend", datetime.combine(item.date, item.end_time, tzinfo=self._timezone))
                event.add("dtstamp", stamp)
                event.add("summary", self._summary(item))
                
                if item.room_number:
                    event.add("location", item.room_number)
                
                description = [item.teacher_name] if item.teacher_name else []
                if item.is_recovery_projection and item.recovery_reason:
                    description.append(item.recovery_reason)
                if description:
                    event.add("description", "\n".join(description))
                
                self._calendar.add_component(event)
        
        return self._calendar
    
    def save(self, output_path: str) -> None:
        """Save the calendar to an .ics file.
        
        Args:
            output_path: Path to the output file.
            
        Raises:
            RuntimeError: If transform() hasn't been called yet.
        """
        if self._calendar is None:
            raise RuntimeError("No calendar data. Call transform() first.")
        
        with open(output_path, "wb") as f:
            f.write(self._calendar.to_ical())
