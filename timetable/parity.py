"""Odd/even week calculation relative to a fixed academic epoch."""

from datetime import date, datetime, timedelta

from .models import Parity


def monday_of(day: date) -> date:
    """Return the Monday of the week containing ``day``."""
    return day - timedelta(days=day.weekday())


class ParityCalculator:
    """Determines whether a date falls in an odd or an even week.

    Weeks are counted from ``epoch`` (week 0, an even week). Dates before the
    epoch use the same arithmetic, so week -1 is odd, week -2 even, and so on.
    """

    def __init__(self, epoch: date) -> None:
        """Initialize the calculator.

        Args:
            epoch: Monday that starts the academic week count.

        Raises:
            ValueError: If ``epoch`` is not a Monday.
        """
        if isinstance(epoch, datetime):
            epoch = epoch.date()
        if epoch.weekday() != 0:
            raise ValueError(f"Parity epoch must be a Monday, got {epoch:%A} {epoch}")
        self._epoch = epoch

    @property
    def epoch(self) -> date:
        return self._epoch

    def week_index(self, day: date) -> int:
        """Number of whole weeks between the epoch and the week of ``day``."""
        if isinstance(day, datetime):
            day = day.date()
        return (monday_of(day) - self._epoch).days // 7

    def is_odd_week(self, day: date) -> bool:
        return self.week_index(day) % 2 == 1

    def parity_of(self, day: date) -> Parity:
        return Parity.ODD if self.is_odd_week(day) else Parity.EVEN
