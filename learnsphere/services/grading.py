"""Grade bands, score rounding and completion-status ranking."""

from __future__ import annotations

import enum
import math
from collections.abc import Iterable

GRADE_A_MIN = 80
GRADE_B_MIN = 50

PASSING_GRADES = frozenset({"A", "B"})


def calculate_grade(score: float) -> str:
    """Map an average score (0-100) to a letter grade.

    >= 80 is "A", 50 up to 80 is "B", anything lower is "C".
    """
    if math.isnan(score):
        raise ValueError("score must be a number (got NaN)")
    if score >= GRADE_A_MIN:
        return "A"
    if score >= GRADE_B_MIN:
        return "B"
    return "C"


def is_passing(grade: str | None) -> bool:
    return grade in PASSING_GRADES


def round_score(value: float) -> int:
    """Round half up (72.5 -> 73), the way report scores are displayed."""
    return math.floor(value + 0.5)


def average(values: Iterable[float]) -> float | None:
    values = list(values)
    if not values:
        return None
    return sum(values) / len(values)


class CompletionStatus(enum.Enum):
    """Per-course completion state, ranked for the overall-status reduction.

    A student's overall status is the highest-ranked state among their
    courses: any course still In Progress outranks one merely Enrolled,
    which outranks Completed.  A student with no courses is Not Enrolled,
    the lowest rank.  So one untouched course keeps an otherwise finished
    student at "Enrolled" rather than "Completed".
    """

    NOT_ENROLLED = ("Not Enrolled", 0)
    COMPLETED = ("Completed", 1)
    ENROLLED = ("Enrolled", 2)
    IN_PROGRESS = ("In Progress", 3)

    def __init__(self, label: str, rank: int) -> None:
        self.label = label
        self.rank = rank

    def outranks(self, other: CompletionStatus) -> bool:
        return self.rank > other.rank

    @classmethod
    def for_course(cls, total: int, completed: int) -> CompletionStatus:
        """Status of one course from its submission counts."""
        if total > 0 and completed == total:
            return cls.COMPLETED
        if completed > 0:
            return cls.IN_PROGRESS
        return cls.ENROLLED

    @classmethod
    def overall(cls, statuses: Iterable[CompletionStatus]) -> CompletionStatus:
        result = cls.NOT_ENROLLED
        for status in statuses:
            if status.outranks(result):
                result = status
        return result
