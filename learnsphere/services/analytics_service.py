"""Learning-analytics aggregation.

Three reports are derived from one ``AnalyticsSnapshot``:

  student_performance  one row per student, across their courses
  course_performance   one row per course, across all students
  summary_stats        platform-wide counts

The module-level functions are pure over the snapshot.  ``AnalyticsService``
is the async entry point used by the API: it loads a fresh snapshot per
call, runs the aggregator, and records metrics.

"Courses a student is in" means courses with at least one submission for
that student.  The Enrollment collection carries no student reference, so
it only feeds the raw per-course enrolled counts.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Awaitable, Callable
from typing import TypeVar

from learnsphere.core.metrics import AGGREGATION_DURATION, AGGREGATIONS, SKIPPED_REFERENCES
from learnsphere.models.course import LIVE, Course, course_key
from learnsphere.models.report import (
    AttendanceStats,
    CourseReportRow,
    CourseResult,
    StudentReportRow,
    SummaryStats,
)
from learnsphere.models.user import User
from learnsphere.services.compliance import (
    COMPLIANT,
    NON_COMPLIANT,
    NOT_APPLICABLE,
    check_compliance,
)
from learnsphere.services.course_type import get_course_type, sessions_for_course
from learnsphere.services.grading import (
    CompletionStatus,
    average,
    calculate_grade,
    is_passing,
    round_score,
)
from learnsphere.services.snapshot import AnalyticsSnapshot, CourseNotFound, load_snapshot

logger = logging.getLogger(__name__)

T = TypeVar("T")

ATTENDANCE_NA = "NA"
NOT_ATTENDED = "Not Attended"


# ---------------------------------------------------------------------------
# Student performance
# ---------------------------------------------------------------------------


def _has_filter(course_filter: int | str | None) -> bool:
    return course_filter is not None and course_filter != ""


def _course_result(
    snapshot: AnalyticsSnapshot, student: User, course: Course
) -> tuple[CourseResult, CompletionStatus]:
    submissions = snapshot.submissions_for(student.id)[course.key]
    completed_scores = [s.score or 0 for s in submissions if s.completed]

    mean = average(completed_scores)
    score = round_score(mean) if mean is not None else None
    grade = calculate_grade(score) if score is not None else None

    status = CompletionStatus.for_course(len(submissions), len(completed_scores))
    compliance = check_compliance(
        student.id, course.id, snapshot.submissions, now=snapshot.taken_at
    )
    result = CourseResult(
        course_id=course.key,
        title=course.title,
        grade=grade,
        score=score,
        status=status.label,
        compliance=compliance,
    )
    return result, status


def _has_live_attendance(
    snapshot: AnalyticsSnapshot, student: User, course: Course
) -> bool:
    """True when the student is enrolled in any live session of the course."""
    if get_course_type(course, snapshot.live_sessions) != LIVE:
        return False
    attendance = snapshot.attendance_for(student.id)
    for session in sessions_for_course(course, snapshot.live_sessions):
        record = attendance.get(session.id)
        if record is not None and record.enrolled:
            return True
    return False


def _attendance_display(snapshot: AnalyticsSnapshot, student: User) -> str:
    dates = [
        record.date
        for record in snapshot.attendance_for(student.id).values()
        if record.enrolled and record.attended and record.date
    ]
    if not dates:
        return NOT_ATTENDED
    return ", ".join(dates)


def _student_row(
    snapshot: AnalyticsSnapshot, student: User, course_filter: int | str | None
) -> StudentReportRow | None:
    filter_key = course_key(course_filter) if _has_filter(course_filter) else None

    results: list[CourseResult] = []
    statuses: list[CompletionStatus] = []
    has_attendance_data = False

    for cid, submissions in snapshot.submissions_for(student.id).items():
        if not submissions:
            continue
        lookup = snapshot.find_course(cid)
        if isinstance(lookup, CourseNotFound):
            logger.debug(
                "Skipping submissions of student=%s for unknown course=%s",
                student.id,
                lookup.course_id,
            )
            SKIPPED_REFERENCES.inc()
            continue
        course = lookup
        if filter_key is not None and course.key != filter_key:
            continue

        result, status = _course_result(snapshot, student, course)
        results.append(result)
        statuses.append(status)
        if _has_live_attendance(snapshot, student, course):
            has_attendance_data = True

    if not results and filter_key is not None:
        return None

    overall_status = CompletionStatus.overall(statuses)

    if any(r.compliance == NON_COMPLIANT for r in results):
        compliance = NON_COMPLIANT
    elif results:
        compliance = COMPLIANT
    else:
        compliance = NOT_APPLICABLE

    mean = average(r.score for r in results if r.score is not None)
    score = round_score(mean) if mean is not None else None
    grade = calculate_grade(score) if score is not None else None

    attendance = (
        _attendance_display(snapshot, student) if has_attendance_data else ATTENDANCE_NA
    )

    return StudentReportRow(
        student_id=student.id,
        student_name=student.name,
        student_email=student.email,
        courses_enrolled=", ".join(r.title for r in results) if results else "N/A",
        courses=tuple(results),
        grade=grade,
        score=score,
        status=overall_status.label,
        compliance=compliance,
        attendance=attendance,
    )


def student_performance(
    snapshot: AnalyticsSnapshot, course_filter: int | str | None = None
) -> list[StudentReportRow]:
    """One row per student.

    With a course filter only students with submissions in that course are
    reported, restricted to that course.  Without one every student is
    reported, including those with no courses at all.
    """
    rows: list[StudentReportRow] = []
    for student in snapshot.students:
        row = _student_row(snapshot, student, course_filter)
        if row is not None:
            rows.append(row)
    return rows


# ---------------------------------------------------------------------------
# Course performance
# ---------------------------------------------------------------------------


def _attendance_stats(snapshot: AnalyticsSnapshot, course: Course) -> AttendanceStats:
    enrolled = 0
    attended = 0
    for session in sessions_for_course(course, snapshot.live_sessions):
        for student in snapshot.students:
            record = snapshot.attendance_for(student.id).get(session.id)
            if record is None or not record.enrolled:
                continue
            enrolled += 1
            if record.attended:
                attended += 1
    return AttendanceStats(
        enrolled=enrolled, attended=attended, not_attended=enrolled - attended
    )


def _course_row(snapshot: AnalyticsSnapshot, course: Course) -> CourseReportRow:
    course_type = get_course_type(course, snapshot.live_sessions)

    # Raw record count: enrollments carry no student id, so duplicates
    # cannot be told apart from distinct learners.
    enrolled = sum(1 for e in snapshot.enrollments if e.course_key == course.key)

    passed = 0
    failed = 0
    for student in snapshot.students:
        submissions = snapshot.submissions_for(student.id).get(course.key, ())
        mean = average(s.score or 0 for s in submissions if s.completed)
        if mean is None:
            continue
        if is_passing(calculate_grade(round_score(mean))):
            passed += 1
        else:
            failed += 1

    return CourseReportRow(
        id=course.id,
        title=course.title,
        level=course.level,
        categories=course.categories,
        status=course.status,
        type=course_type,
        enrolled=enrolled,
        passed=passed,
        failed=failed,
        attendance_stats=(
            _attendance_stats(snapshot, course) if course_type == LIVE else None
        ),
    )


def course_performance(snapshot: AnalyticsSnapshot) -> list[CourseReportRow]:
    """One row per course, in catalog order."""
    return [_course_row(snapshot, course) for course in snapshot.courses]


# ---------------------------------------------------------------------------
# Summary statistics
# ---------------------------------------------------------------------------


def summary_stats(snapshot: AnalyticsSnapshot) -> SummaryStats:
    """Platform-wide counts.

    ``total_enrolled`` is the number of distinct course ids in the
    Enrollment collection, not a student count.  Pass/fail is one verdict
    per student from the unrounded mean of all their completed scores
    across every course, zeros included.
    """
    total_passed = 0
    total_failed = 0
    for student in snapshot.students:
        scores = [
            s.score or 0
            for submissions in snapshot.submissions_for(student.id).values()
            for s in submissions
            if s.completed
        ]
        mean = average(scores)
        if mean is None:
            continue
        if is_passing(calculate_grade(mean)):
            total_passed += 1
        else:
            total_failed += 1

    return SummaryStats(
        total_courses=len(snapshot.courses),
        total_enrolled=len({e.course_key for e in snapshot.enrollments}),
        total_passed=total_passed,
        total_failed=total_failed,
        total_students=len(snapshot.students),
    )


# ---------------------------------------------------------------------------
# Async entry point
# ---------------------------------------------------------------------------


class AnalyticsService:
    """Loads a fresh snapshot for every call and runs one aggregator over it."""

    def __init__(
        self,
        snapshot_loader: Callable[[], Awaitable[AnalyticsSnapshot]] = load_snapshot,
    ) -> None:
        self._load = snapshot_loader

    async def _run(
        self,
        report: str,
        aggregate: Callable[[AnalyticsSnapshot], T],
        **log_context: object,
    ) -> T:
        start = time.monotonic()
        try:
            snapshot = await self._load()
            result = aggregate(snapshot)
        except Exception:
            AGGREGATIONS.labels(report=report, outcome="error").inc()
            raise
        finally:
            AGGREGATION_DURATION.labels(report=report).observe(time.monotonic() - start)

        AGGREGATIONS.labels(report=report, outcome="ok").inc()
        logger.info(
            "Aggregated %s report",
            report,
            extra={
                "report": report,
                "rows": len(result) if isinstance(result, list) else 1,
                **log_context,
            },
        )
        return result

    async def get_student_performance(
        self, course_filter: int | str | None = None
    ) -> list[StudentReportRow]:
        return await self._run(
            "students",
            lambda snap: student_performance(snap, course_filter),
            course_filter=course_filter,
        )

    async def get_course_performance(self) -> list[CourseReportRow]:
        return await self._run("courses", course_performance)

    async def get_summary_stats(self) -> SummaryStats:
        return await self._run("summary", summary_stats)


analytics_service = AnalyticsService()
