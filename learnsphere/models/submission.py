from __future__ import annotations

import datetime
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Submission:
    """One assessment result for a (student, course) pair."""

    id: int
    score: float = 0
    completed: bool = False
    due_date: datetime.datetime | None = None

    def is_overdue(self, now: datetime.datetime) -> bool:
        """Past its due date and still not completed."""
        if self.due_date is None or self.completed:
            return False
        return self.due_date < now


@dataclass(frozen=True, slots=True)
class AttendanceRecord:
    enrolled: bool = False
    attended: bool = False
    date: str | None = None  # YYYY-MM-DD of the attended session
