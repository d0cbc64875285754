"""Course catalog mock store.

Courses are held in process memory and every read pays an artificial
latency (COURSE_FETCH_DELAY_MS) standing in for a network round-trip.
Reads return copies; the catalog itself is only changed through ``add``
and ``remove``.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Protocol

from learnsphere.core.config import SETTINGS
from learnsphere.models.course import Course, course_key

logger = logging.getLogger(__name__)


class CourseFetchError(Exception):
    """The course catalog could not be read."""


class CourseRepo(Protocol):
    async def list_all(self) -> list[Course]: ...
    def add(self, course: Course) -> None: ...
    def remove(self, course_id: int | str) -> None: ...


class InMemoryCourseRepo:
    def __init__(self, delay_ms: int = 0) -> None:
        self._delay_s = delay_ms / 1000
        self._courses: dict[str, Course] = {}

    async def list_all(self) -> list[Course]:
        if self._delay_s:
            await asyncio.sleep(self._delay_s)
        return list(self._courses.values())

    def add(self, course: Course) -> None:
        if course.key in self._courses:
            raise ValueError(f"course {course.id!r} already exists")
        self._courses[course.key] = course
        logger.debug("Course added id=%s title=%s", course.id, course.title)

    def remove(self, course_id: int | str) -> None:
        if self._courses.pop(course_key(course_id), None) is None:
            raise KeyError("course not found")


course_repo: CourseRepo = InMemoryCourseRepo(delay_ms=SETTINGS.course_fetch_delay_ms)
