"""Transient report rows produced by the analytics aggregators.

None of these are persisted; they are rebuilt on every aggregation call
and handed to the HTTP layer or the CSV exporter.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class CourseResult:
    """One student's standing in one course."""

    course_id: str
    title: str
    grade: str | None
    score: int | None
    status: str  # Completed|In Progress|Enrolled
    compliance: str  # Compliant|Non-Compliant


@dataclass(frozen=True, slots=True)
class StudentReportRow:
    student_id: str
    student_name: str
    student_email: str
    courses_enrolled: str  # comma-joined titles, or "N/A"
    courses: tuple[CourseResult, ...]
    grade: str | None
    score: int | None
    status: str  # In Progress|Enrolled|Completed|Not Enrolled
    compliance: str  # Non-Compliant|Compliant|N/A
    attendance: str  # "NA", "Not Attended", or comma-joined dates


@dataclass(frozen=True, slots=True)
class AttendanceStats:
    enrolled: int
    attended: int
    not_attended: int


@dataclass(frozen=True, slots=True)
class CourseReportRow:
    id: int | str
    title: str
    level: str
    categories: tuple[str, ...]
    status: str
    type: str  # Live|Self-Paced
    enrolled: int
    passed: int
    failed: int
    attendance_stats: AttendanceStats | None


@dataclass(frozen=True, slots=True)
class SummaryStats:
    total_courses: int
    total_enrolled: int
    total_passed: int
    total_failed: int
    total_students: int
