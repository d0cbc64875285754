from __future__ import annotations

from dataclasses import dataclass

LIVE = "Live"
SELF_PACED = "Self-Paced"


def course_key(course_id: int | str) -> str:
    """Canonical join key for a course id.

    Courses carry integer ids while stored submission maps key them by
    string, so every join compares the string form.
    """
    return str(course_id)


@dataclass(frozen=True, slots=True)
class Course:
    id: int | str
    title: str
    level: str = "beginner"  # beginner|intermediate|advanced
    categories: tuple[str, ...] = ()
    slug: str = ""
    status: str = "draft"  # draft|published
    type: str | None = None  # explicit Live|Self-Paced, else derived

    @property
    def key(self) -> str:
        return course_key(self.id)


@dataclass(frozen=True, slots=True)
class LiveSession:
    id: str
    title: str
    course_id: int | str
    start_time: str  # ISO-8601 with offset

    @property
    def course_key(self) -> str:
        return course_key(self.course_id)


@dataclass(frozen=True, slots=True)
class Enrollment:
    """A course a learner enrolled in.

    Carries no student reference; counts derived from it are raw record
    counts per course.
    """

    course_id: int | str
    title: str
    level: str = "beginner"
    lessons: int = 0

    @property
    def course_key(self) -> str:
        return course_key(self.course_id)
