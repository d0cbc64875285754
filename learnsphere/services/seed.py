"""Demo data for local development.

Loads fifteen students with one to three courses each, a mix of grades,
three non-compliant learners, live-session attendance for a handful of
them, and the matching enrollment records.  Due dates are relative to
``now`` so compliance results stay stable whenever the seed runs.

Seeding runs once per store; a flag key marks it done.
"""

from __future__ import annotations

import datetime
import logging

from learnsphere.db.kv_store import KeyValueStore, kv_store
from learnsphere.models.course import Course, Enrollment
from learnsphere.models.submission import AttendanceRecord, Submission
from learnsphere.models.user import User
from learnsphere.repos.attendance_repo import KVAttendanceRepo
from learnsphere.repos.course_repo import CourseRepo, course_repo
from learnsphere.repos.enrollment_repo import KVEnrollmentRepo
from learnsphere.repos.submission_repo import KVSubmissionRepo
from learnsphere.repos.user_repo import KVUserRepo, UserAlreadyExistsError

logger = logging.getLogger(__name__)

SEEDED_KEY = "learnsphere_dummy_initialized"

DEMO_COURSES: tuple[Course, ...] = (
    Course(
        id=1,
        title="React Basics",
        slug="react-basics",
        level="beginner",
        categories=("Web Development",),
        status="published",
    ),
    Course(
        id=2,
        title="JavaScript Deep Dive",
        slug="javascript-deep-dive",
        level="intermediate",
        categories=("Web Development",),
        status="published",
    ),
    Course(
        id=3,
        title=".NET Fundamentals",
        slug="dotnet-fundamentals",
        level="beginner",
        categories=("Backend", "Languages"),
        status="draft",
    ),
)

_LESSONS = {1: 120, 2: 80, 3: 45}

DEMO_NAMES = (
    "John Doe",
    "Jane Smith",
    "Bob Johnson",
    "Alice Williams",
    "Charlie Brown",
    "Diana Prince",
    "Eve Davis",
    "Frank Miller",
    "Grace Lee",
    "Henry Wilson",
    "Ivy Chen",
    "Jack Taylor",
    "Sarah Martinez",
    "Michael Anderson",
    "Emma Thompson",
)

# student number -> course id -> [(score, completed, due N days ago)]
_SUBMISSIONS: dict[int, dict[int, list[tuple[int, bool, int]]]] = {
    1: {1: [(85, True, 7), (90, True, 5)]},
    2: {1: [(65, True, 7), (70, True, 5)]},
    3: {1: [(45, True, 7), (40, False, 10)]},
    4: {2: [(88, True, 6), (92, True, 4)]},
    5: {3: [(72, True, 5), (68, True, 3)]},
    6: {1: [(82, True, 7), (85, True, 5)], 2: [(68, True, 6), (72, True, 4)]},
    7: {1: [(75, True, 7), (78, True, 5)], 2: [(55, True, 6), (48, True, 4)]},
    8: {1: [(42, True, 7), (45, False, 8)], 3: [(65, True, 5), (70, True, 3)]},
    9: {2: [(90, True, 6), (88, True, 4)], 3: [(85, True, 5), (92, True, 3)]},
    10: {1: [(48, True, 7), (42, False, 9)], 3: [(45, True, 5), (40, True, 3)]},
    11: {
        1: [(88, True, 7), (85, True, 5)],
        2: [(72, True, 6), (68, True, 4)],
        3: [(52, True, 5), (48, True, 3)],
    },
    12: {
        1: [(75, True, 7), (78, True, 5)],
        2: [(82, True, 6), (85, True, 4)],
        3: [(70, True, 5), (72, True, 3)],
    },
    13: {
        1: [(45, True, 7), (42, False, 9)],
        2: [(48, True, 6), (50, True, 4)],
        3: [(40, True, 5), (38, False, 8)],
    },
    14: {
        1: [(95, True, 7), (92, True, 5)],
        2: [(88, True, 6), (90, True, 4)],
        3: [(85, True, 5), (88, True, 3)],
    },
    15: {
        1: [(70, True, 7), (75, True, 5)],
        2: [(48, True, 6), (52, True, 4)],
        3: [(85, True, 5), (90, True, 3)],
    },
}

# student number -> session id -> (attended, date)
_ATTENDANCE: dict[int, dict[str, tuple[bool, str | None]]] = {
    1: {"ls-101": (True, "2026-01-10"), "ls-102": (True, "2026-01-12")},
    4: {"ls-101": (False, None), "ls-102": (False, None)},
    6: {"ls-101": (True, "2026-01-10"), "ls-102": (False, None)},
    9: {
        "ls-101": (True, "2026-01-10"),
        "ls-102": (True, "2026-01-12"),
        "ls-103": (True, "2026-01-14"),
    },
    11: {"ls-101": (False, None), "ls-102": (True, "2026-01-12")},
    14: {
        "ls-101": (True, "2026-01-10"),
        "ls-102": (True, "2026-01-12"),
        "ls-103": (True, "2026-01-14"),
    },
}

# One enrollment record per (student, course) in student order: 1-5 take
# one course, 6-10 two, 11-15 all three.
_ENROLLED_COURSE_IDS: tuple[int, ...] = (1, 1, 1, 2, 3, 1, 2, 1, 2, 1, 3, 2, 3, 1, 3) + (
    1,
    2,
    3,
) * 5


def demo_email(n: int) -> str:
    return f"student{n}@example.com"


def _demo_enrollment(course_id: int) -> Enrollment:
    course = next(c for c in DEMO_COURSES if c.id == course_id)
    return Enrollment(
        course_id=course_id,
        title=course.title,
        level=course.level,
        lessons=_LESSONS[course_id],
    )


async def seed_demo_data(
    store: KeyValueStore = kv_store,
    courses: CourseRepo = course_repo,
    now: datetime.datetime | None = None,
) -> bool:
    """Load the demo data set.  Returns False when it was already loaded."""
    if await store.get(SEEDED_KEY) == "true":
        logger.debug("Demo data already seeded")
        return False

    now = now or datetime.datetime.now(datetime.UTC)

    for course in DEMO_COURSES:
        try:
            courses.add(course)
        except ValueError:
            logger.debug("Demo course %s already in catalog", course.id)

    users = KVUserRepo(store)
    for n, name in enumerate(DEMO_NAMES, start=1):
        try:
            await users.add(User.new(name=name, email=demo_email(n)))
        except UserAlreadyExistsError:
            logger.debug("Demo student %s already registered", demo_email(n))

    await KVSubmissionRepo(store).replace_all(
        {
            demo_email(n): {
                str(course_id): [
                    Submission(
                        id=i,
                        score=score,
                        completed=completed,
                        due_date=now - datetime.timedelta(days=days_ago),
                    )
                    for i, (score, completed, days_ago) in enumerate(rows, start=1)
                ]
                for course_id, rows in by_course.items()
            }
            for n, by_course in _SUBMISSIONS.items()
        }
    )

    await KVAttendanceRepo(store).replace_all(
        {
            demo_email(n): {
                session_id: AttendanceRecord(enrolled=True, attended=attended, date=date)
                for session_id, (attended, date) in by_session.items()
            }
            for n, by_session in _ATTENDANCE.items()
        }
    )

    await KVEnrollmentRepo(store).append(
        [_demo_enrollment(cid) for cid in _ENROLLED_COURSE_IDS]
    )

    await store.set(SEEDED_KEY, "true")
    logger.info(
        "Seeded demo data: %d students, %d courses, %d enrollments",
        len(DEMO_NAMES),
        len(DEMO_COURSES),
        len(_ENROLLED_COURSE_IDS),
    )
    return True
