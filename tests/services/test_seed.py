from __future__ import annotations

import asyncio

from learnsphere.db.kv_store import InMemoryKeyValueStore
from learnsphere.models.report import AttendanceStats
from learnsphere.repos.attendance_repo import KVAttendanceRepo
from learnsphere.repos.course_repo import InMemoryCourseRepo
from learnsphere.repos.enrollment_repo import KVEnrollmentRepo
from learnsphere.repos.live_session_repo import StaticLiveSessionRepo
from learnsphere.repos.submission_repo import KVSubmissionRepo
from learnsphere.repos.user_repo import KVUserRepo
from learnsphere.services.analytics_service import (
    course_performance,
    student_performance,
    summary_stats,
)
from learnsphere.services.seed import seed_demo_data
from learnsphere.services.snapshot import load_snapshot
from tests.conftest import NOW


def _seeded_snapshot():
    store = InMemoryKeyValueStore()
    courses = InMemoryCourseRepo()

    async def _run():
        assert await seed_demo_data(store, courses, now=NOW) is True
        return await load_snapshot(
            users=KVUserRepo(store),
            courses=courses,
            enrollments=KVEnrollmentRepo(store),
            submissions=KVSubmissionRepo(store),
            attendance=KVAttendanceRepo(store),
            live_sessions=StaticLiveSessionRepo(),
        )

    return asyncio.run(_run())


def test_seed_runs_once() -> None:
    store = InMemoryKeyValueStore()
    courses = InMemoryCourseRepo()
    assert asyncio.run(seed_demo_data(store, courses, now=NOW)) is True
    assert asyncio.run(seed_demo_data(store, courses, now=NOW)) is False


def test_seeded_summary() -> None:
    stats = summary_stats(_seeded_snapshot())
    assert stats.total_students == 15
    assert stats.total_courses == 3
    assert stats.total_enrolled == 3
    assert stats.total_passed + stats.total_failed == 15


def test_seeded_student_rows() -> None:
    rows = {r.student_email: r for r in student_performance(_seeded_snapshot())}

    first = rows["student1@example.com"]
    assert (first.grade, first.score, first.status) == ("A", 88, "Completed")
    assert first.attendance == "2026-01-10, 2026-01-12"

    assert rows["student3@example.com"].compliance == "Non-Compliant"
    assert rows["student3@example.com"].status == "In Progress"
    assert rows["student8@example.com"].compliance == "Non-Compliant"
    assert rows["student10@example.com"].compliance == "Non-Compliant"
    assert rows["student13@example.com"].compliance == "Non-Compliant"
    assert rows["student9@example.com"].attendance == "2026-01-10, 2026-01-12, 2026-01-14"
    # Enrolled only in sessions of course 1 while taking course 2.
    assert rows["student4@example.com"].attendance == "NA"


def test_seeded_course_rows() -> None:
    rows = {r.id: r for r in course_performance(_seeded_snapshot())}

    assert [rows[c].enrolled for c in (1, 2, 3)] == [12, 9, 9]
    assert (rows[1].passed, rows[1].failed) == (8, 4)
    assert rows[1].attendance_stats == AttendanceStats(
        enrolled=12, attended=8, not_attended=4
    )
    assert rows[2].attendance_stats == AttendanceStats(
        enrolled=2, attended=2, not_attended=0
    )
    assert rows[3].type == "Self-Paced"
    assert rows[3].attendance_stats is None
