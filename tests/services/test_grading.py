from __future__ import annotations

import math

import pytest

from learnsphere.services.grading import (
    CompletionStatus,
    average,
    calculate_grade,
    is_passing,
    round_score,
)

# ---- grade bands ----


@pytest.mark.parametrize(
    ("score", "grade"),
    [
        (100, "A"),
        (80, "A"),
        (79.9, "B"),
        (50, "B"),
        (49.9, "C"),
        (0, "C"),
    ],
)
def test_calculate_grade_boundaries(score: float, grade: str) -> None:
    assert calculate_grade(score) == grade


def test_calculate_grade_rejects_nan() -> None:
    with pytest.raises(ValueError, match="NaN"):
        calculate_grade(math.nan)


def test_is_passing() -> None:
    assert is_passing("A")
    assert is_passing("B")
    assert not is_passing("C")
    assert not is_passing(None)


# ---- rounding and averaging ----


def test_round_score_rounds_half_up() -> None:
    assert round_score(72.5) == 73
    assert round_score(49.5) == 50
    assert round_score(72.4) == 72
    assert round_score(80) == 80


def test_average_of_nothing_is_none() -> None:
    assert average([]) is None
    assert average([90, 70]) == 80


# ---- completion status ----


def test_course_status_from_counts() -> None:
    assert CompletionStatus.for_course(2, 2) is CompletionStatus.COMPLETED
    assert CompletionStatus.for_course(2, 1) is CompletionStatus.IN_PROGRESS
    assert CompletionStatus.for_course(2, 0) is CompletionStatus.ENROLLED
    assert CompletionStatus.for_course(0, 0) is CompletionStatus.ENROLLED


def test_overall_status_of_no_courses_is_not_enrolled() -> None:
    assert CompletionStatus.overall([]) is CompletionStatus.NOT_ENROLLED


def test_overall_status_enrolled_beats_completed() -> None:
    statuses = [CompletionStatus.COMPLETED, CompletionStatus.ENROLLED]
    assert CompletionStatus.overall(statuses) is CompletionStatus.ENROLLED


def test_overall_status_in_progress_beats_everything() -> None:
    statuses = [
        CompletionStatus.ENROLLED,
        CompletionStatus.IN_PROGRESS,
        CompletionStatus.COMPLETED,
    ]
    assert CompletionStatus.overall(statuses) is CompletionStatus.IN_PROGRESS


def test_overall_status_all_completed() -> None:
    statuses = [CompletionStatus.COMPLETED, CompletionStatus.COMPLETED]
    assert CompletionStatus.overall(statuses) is CompletionStatus.COMPLETED
