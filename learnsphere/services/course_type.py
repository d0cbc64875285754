from __future__ import annotations

from collections.abc import Iterable

from learnsphere.models.course import LIVE, SELF_PACED, Course, LiveSession


def sessions_for_course(
    course: Course, live_sessions: Iterable[LiveSession]
) -> list[LiveSession]:
    return [s for s in live_sessions if s.course_key == course.key]


def get_course_type(course: Course, live_sessions: Iterable[LiveSession]) -> str:
    """"Live" or "Self-Paced".

    An explicit ``course.type`` wins; otherwise a course is Live when any
    scheduled live session points at it.
    """
    if course.type:
        return course.type
    if sessions_for_course(course, live_sessions):
        return LIVE
    return SELF_PACED
