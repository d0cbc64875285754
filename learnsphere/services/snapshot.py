"""Read-only snapshot of the record store.

Aggregators never talk to the repos directly.  ``load_snapshot`` reads
every collection once, freezes it, and the aggregators run as pure
functions over the result.  The reads are independent: there is no
isolation between them, so a write landing mid-load may be visible in
one collection and not another.
"""

from __future__ import annotations

import datetime
import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

from learnsphere.models.course import Course, Enrollment, LiveSession, course_key
from learnsphere.models.submission import AttendanceRecord, Submission
from learnsphere.models.user import User
from learnsphere.repos.attendance_repo import AttendanceRepo, attendance_repo
from learnsphere.repos.course_repo import CourseFetchError, CourseRepo, course_repo
from learnsphere.repos.enrollment_repo import EnrollmentRepo, enrollment_repo
from learnsphere.repos.live_session_repo import LiveSessionRepo, live_session_repo
from learnsphere.repos.submission_repo import SubmissionRepo, submission_repo
from learnsphere.repos.user_repo import UserRepo, user_repo

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CourseNotFound:
    """Lookup result for a course id with no matching course record."""

    course_id: str


@dataclass(frozen=True)
class AnalyticsSnapshot:
    students: tuple[User, ...]
    courses: tuple[Course, ...]
    enrollments: tuple[Enrollment, ...]
    submissions: Mapping[str, Mapping[str, tuple[Submission, ...]]]
    attendance: Mapping[str, Mapping[str, AttendanceRecord]]
    live_sessions: tuple[LiveSession, ...]
    taken_at: datetime.datetime = field(
        default_factory=lambda: datetime.datetime.now(datetime.UTC)
    )

    @classmethod
    def build(
        cls,
        *,
        users: list[User] | tuple[User, ...] = (),
        courses: list[Course] | tuple[Course, ...] = (),
        enrollments: list[Enrollment] | tuple[Enrollment, ...] = (),
        submissions: Mapping[str, Mapping[str, list[Submission]]] | None = None,
        attendance: Mapping[str, Mapping[str, AttendanceRecord]] | None = None,
        live_sessions: list[LiveSession] | tuple[LiveSession, ...] = (),
        taken_at: datetime.datetime | None = None,
    ) -> AnalyticsSnapshot:
        """Freeze raw collections; non-student users are dropped here."""
        frozen_submissions = MappingProxyType(
            {
                sid: MappingProxyType(
                    {course_key(cid): tuple(rows) for cid, rows in by_course.items()}
                )
                for sid, by_course in (submissions or {}).items()
            }
        )
        frozen_attendance = MappingProxyType(
            {
                sid: MappingProxyType(dict(by_session))
                for sid, by_session in (attendance or {}).items()
            }
        )
        return cls(
            students=tuple(u for u in users if u.is_student),
            courses=tuple(courses),
            enrollments=tuple(enrollments),
            submissions=frozen_submissions,
            attendance=frozen_attendance,
            live_sessions=tuple(live_sessions),
            taken_at=taken_at or datetime.datetime.now(datetime.UTC),
        )

    def find_course(self, course_id: int | str) -> Course | CourseNotFound:
        key = course_key(course_id)
        for course in self.courses:
            if course.key == key:
                return course
        return CourseNotFound(course_id=key)

    def submissions_for(self, student_id: str) -> Mapping[str, tuple[Submission, ...]]:
        return self.submissions.get(student_id, MappingProxyType({}))

    def attendance_for(self, student_id: str) -> Mapping[str, AttendanceRecord]:
        return self.attendance.get(student_id, MappingProxyType({}))


async def load_snapshot(
    *,
    users: UserRepo = user_repo,
    courses: CourseRepo = course_repo,
    enrollments: EnrollmentRepo = enrollment_repo,
    submissions: SubmissionRepo = submission_repo,
    attendance: AttendanceRepo = attendance_repo,
    live_sessions: LiveSessionRepo = live_session_repo,
) -> AnalyticsSnapshot:
    """Read every collection once.

    Raises CourseFetchError when the course catalog cannot be read; every
    join depends on it, so there is no partial result.
    """
    try:
        course_list = await courses.list_all()
    except Exception as exc:
        logger.exception("Course catalog fetch failed")
        raise CourseFetchError("course catalog unavailable") from exc

    return AnalyticsSnapshot.build(
        users=await users.list_all(),
        courses=course_list,
        enrollments=await enrollments.list_all(),
        submissions=await submissions.fetch_all(),
        attendance=await attendance.fetch_all(),
        live_sessions=live_sessions.list_all(),
    )
