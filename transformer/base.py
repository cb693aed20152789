"""Abstract base class for resolved schedule transformers."""

from abc import ABC, abstractmethod
from datetime import date
from typing import Any, Mapping, Sequence

from timetable.models import ResolvedScheduleItem


class BaseTransformer(ABC):
    """Abstract base class defining the interface for schedule transformers.
    
    Extend this class to implement transformers for different output formats
    (e.g., iCalendar, JSON, notification schedules, etc.).
    """
    
    @abstractmethod
    def transform(self, days: Mapping[date, Sequence[ResolvedScheduleItem]]) -> Any:
        """Transform resolved schedule days into the target format.
        
        Args:
            days: Resolved items keyed by the date they take place on.
            
        Returns:
            Transformed data in the target format.
        """
        pass
    
    @abstractmethod
    def save(self, output_path: str) -> None:
        """Save the transformed data to a file.
        
        Args:
            output_path: Path to the output file.
        """
        pass
