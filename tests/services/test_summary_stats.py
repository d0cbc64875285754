from __future__ import annotations

from learnsphere.models.course import Enrollment
from learnsphere.models.report import SummaryStats
from learnsphere.models.user import User
from learnsphere.services.analytics_service import course_performance, summary_stats
from tests.conftest import course, done, pending, snapshot, student

S1, S2, S3 = (student(n) for n in range(1, 4))


def _enrollment(course_id: int | str) -> Enrollment:
    return Enrollment(course_id=course_id, title=f"Course {course_id}")


def test_total_enrolled_counts_distinct_course_ids_not_students() -> None:
    # Three learners in course 1 and one in course 2: two distinct courses.
    snap = snapshot(
        users=[S1, S2, S3],
        courses=[course(1), course(2)],
        enrollments=[_enrollment(1), _enrollment(1), _enrollment("1"), _enrollment(2)],
    )
    assert summary_stats(snap).total_enrolled == 2


def test_pass_fail_uses_flattened_scores_across_courses() -> None:
    # Per course this student would average (100 + 10) / 2 = 55, a pass.
    # Flattened, (100 + 10 * 4) / 5 = 28, a fail.
    snap = snapshot(
        users=[S1],
        courses=[course(1), course(2)],
        submissions={
            S1.id: {
                "1": [done(100)],
                "2": [done(10), done(10, sid=2), done(10, sid=3), done(10, sid=4)],
            }
        },
    )
    stats = summary_stats(snap)
    assert (stats.total_passed, stats.total_failed) == (0, 1)


def test_average_is_not_rounded_before_grading() -> None:
    # 79.5 would round to an A; unrounded it is a B, still a pass.
    snap = snapshot(
        users=[S1],
        courses=[course(1)],
        submissions={S1.id: {"1": [done(79), done(80, sid=2)]}},
    )
    assert summary_stats(snap).total_passed == 1


def test_completed_zero_scores_count_in_the_average() -> None:
    # (0 + 0 + 90) / 3 = 30, a fail.
    snap = snapshot(
        users=[S1],
        courses=[course(1)],
        submissions={S1.id: {"1": [done(0), done(0, sid=2), done(90, sid=3)]}},
    )
    stats = summary_stats(snap)
    assert (stats.total_passed, stats.total_failed) == (0, 1)
    assert course_performance(snap)[0].failed == 1


def test_single_completed_zero_gets_a_failing_verdict() -> None:
    snap = snapshot(
        users=[S1],
        courses=[course(1)],
        submissions={S1.id: {"1": [done(0)]}},
    )
    stats = summary_stats(snap)
    assert (stats.total_passed, stats.total_failed) == (0, 1)


def test_students_without_completed_scores_get_no_verdict() -> None:
    snap = snapshot(
        users=[S1, S2],
        courses=[course(1)],
        submissions={S1.id: {"1": [pending()]}, S2.id: {"1": [done(45)]}},
    )
    stats = summary_stats(snap)
    assert (stats.total_passed, stats.total_failed) == (0, 1)


def test_summary_counts() -> None:
    admin = User.new(name="Root", email="root@example.com", role="admin")
    snap = snapshot(
        users=[admin, S1, S2],
        courses=[course(1), course(2), course(3)],
        enrollments=[_enrollment(3)],
        submissions={S1.id: {"1": [done(90)]}, S2.id: {"2": [done(20)]}},
    )
    assert summary_stats(snap) == SummaryStats(
        total_courses=3,
        total_enrolled=1,
        total_passed=1,
        total_failed=1,
        total_students=2,
    )


def test_empty_snapshot() -> None:
    assert summary_stats(snapshot()) == SummaryStats(0, 0, 0, 0, 0)
