"""Assignment storage and the join that annotates resolved periods."""

import json
import logging
import time
from abc import ABC, abstractmethod
from dataclasses import asdict, replace
from datetime import date
from pathlib import Path
from typing import Any, Optional, Sequence, Union

from .errors import AssignmentStoreUnavailable
from .models import Assignment, AssignmentGroup, ResolvedScheduleItem
from .parsing import parse_date

logger = logging.getLogger(__name__)


class AssignmentStore(ABC):
    """Key-value CRUD store of assignments.

    Subclasses only provide ``load`` and ``save``; everything else is built
    on top of them.
    """

    @abstractmethod
    def load(self) -> list[Assignment]:
        """Return every stored assignment.

        Raises:
            AssignmentStoreUnavailable: If the backing storage cannot be read.
        """

    @abstractmethod
    def save(self, assignments: list[Assignment]) -> None:
        """Replace the stored assignments.

        Raises:
            AssignmentStoreUnavailable: If the backing storage cannot be written.
        """

    def add(
        self,
        title: str,
        course_code: str,
        course_name: str,
        due_date: date,
        description: str = "",
        is_priority: bool = False,
        period_id: Optional[str] = None
    ) -> Assignment:
        assignment = Assignment(
            id=str(time.time_ns()),
            title=title,
            course_code=course_code,
            course_name=course_name,
            due_date=due_date,
            description=description,
            is_priority=is_priority,
            period_id=period_id,
        )
        assignments = self.load()
        assignments.append(assignment)
        self.save(assignments)
        return assignment

    def update(self, assignment_id: str, **changes: Any) -> bool:
        """Apply ``changes`` to one assignment; returns False if it is unknown."""
        assignments = self.load()
        for index, assignment in enumerate(assignments):
            if assignment.id == assignment_id:
                assignments[index] = replace(assignment, **changes)
                self.save(assignments)
                return True
        return False

    def toggle_completion(self, assignment_id: str) -> bool:
        for assignment in self.load():
            if assignment.id == assignment_id:
                return self.update(assignment_id, is_completed=not assignment.is_completed)
        return False

    def delete(self, assignment_id: str) -> None:
        self.save([a for a in self.load() if a.id != assignment_id])

    def count_assignments_due_for_period(self, key: str, day: date) -> int:
        """Count outstanding assignments due on ``day`` for a period or course.

        Args:
            key: A period id, course code or course name.
            day: Due date to match.

        Returns:
            Number of assignments that are not completed. A blank key
            matches nothing.
        """
        return _count_due(self.load(), key, day)

    def get_assignments_for_period(self, period_id: str) -> list[Assignment]:
        return sorted(
            (a for a in self.load() if a.period_id == period_id),
            key=lambda a: a.due_date,
        )

    def group_by_date(self) -> list[AssignmentGroup]:
        """Group assignments by due date, earliest first."""
        groups: dict[date, AssignmentGroup] = {}
        for assignment in sorted(self.load(), key=lambda a: a.due_date):
            groups.setdefault(assignment.due_date, AssignmentGroup(assignment.due_date)).assignments.append(assignment)
        return list(groups.values())

    def courses(self) -> list[tuple[str, str]]:
        """Distinct (course code, course name) pairs in first-seen order."""
        seen: dict[str, str] = {}
        for assignment in self.load():
            seen.setdefault(assignment.course_code, assignment.course_name)
        return list(seen.items())


class InMemoryAssignmentStore(AssignmentStore):
    """Assignment store kept in process memory."""

    def __init__(self, assignments: Sequence[Assignment] = ()) -> None:
        self._assignments = list(assignments)

    def load(self) -> list[Assignment]:
        return list(self._assignments)

    def save(self, assignments: list[Assignment]) -> None:
        self._assignments = list(assignments)


class JsonFileAssignmentStore(AssignmentStore):
    """Assignment store persisted as a JSON list in a single file."""

    def __init__(self, path: Union[str, Path]) -> None:
        self._path = Path(path)

    def load(self) -> list[Assignment]:
        if not self._path.exists():
            return []
        try:
            records = json.loads(self._path.read_text(encoding="utf-8"))
            if not isinstance(records, list):
                raise AssignmentStoreUnavailable(f"Assignments file {self._path} must contain a JSON list")
            return [_assignment_from_record(record) for record in records]
        except (OSError, ValueError, TypeError, KeyError, AttributeError) as e:
            raise AssignmentStoreUnavailable(f"Cannot read assignments from {self._path}: {e}") from e

    def save(self, assignments: list[Assignment]) -> None:
        records = []
        for assignment in assignments:
            record = asdict(assignment)
            record["due_date"] = assignment.due_date.isoformat()
            records.append(record)
        try:
            self._path.write_text(json.dumps(records, ensure_ascii=False, indent=2), encoding="utf-8")
        except OSError as e:
            raise AssignmentStoreUnavailable(f"Cannot write assignments to {self._path}: {e}") from e


def _count_due(assignments: Sequence[Assignment], key: Optional[str], day: date) -> int:
    if not key:
        return 0
    return sum(
        1
        for a in assignments
        if not a.is_completed
        and a.due_date == day
        and key in (a.period_id, a.course_code, a.course_name)
    )


def _assignment_from_record(record: dict[str, Any]) -> Assignment:
    due = str(record.get("due_date") or record["dueDate"])
    due_date = parse_date(due[:10])
    return Assignment(
        id=str(record["id"]),
        title=record.get("title", ""),
        course_code=record.get("course_code", record.get("courseCode", "")),
        course_name=record.get("course_name", record.get("courseName", "")),
        due_date=due_date,
        description=record.get("description", ""),
        is_completed=bool(record.get("is_completed", record.get("isCompleted", False))),
        is_priority=bool(record.get("is_priority", record.get("isPriority", False))),
        period_id=record.get("period_id", record.get("periodId")),
    )


class AssignmentJoin:
    """Annotates resolved schedule items with outstanding assignment counts."""

    def __init__(self, store: AssignmentStore) -> None:
        self._store = store

    @staticmethod
    def _count(assignments: list[Assignment], item: ResolvedScheduleItem, day: date) -> int:
        count = _count_due(assignments, item.period_id, day)
        if count == 0 and not item.is_custom:
            count = _count_due(assignments, item.subject_name, day)
        return count

    def annotate(self, items: Sequence[ResolvedScheduleItem], day: date) -> list[ResolvedScheduleItem]:
        """Return copies of ``items`` with ``assignment_count`` filled in.

        The order of ``items`` is preserved. When the store is unavailable or
        times out, every count is zero.
        """
        try:
            assignments = self._store.load()
            counts = [self._count(assignments, item, day) for item in items]
        except (AssignmentStoreUnavailable, TimeoutError) as e:
            logger.warning("Assignment store unavailable, showing %s without counts: %s", day, e)
            counts = [0] * len(items)
        return [replace(item, assignment_count=count) for item, count in zip(items, counts)]
