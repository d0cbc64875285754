from __future__ import annotations

import logging
from typing import Protocol

from learnsphere.db.kv_store import KeyValueStore, kv_store, read_json, write_json
from learnsphere.models.course import Enrollment, course_key

logger = logging.getLogger(__name__)

ENROLLMENTS_KEY = "learnsphere_enrollments"


class EnrollmentRepo(Protocol):
    async def list_all(self) -> list[Enrollment]: ...
    async def enroll(self, enrollment: Enrollment) -> bool: ...
    async def unenroll(self, course_id: int | str) -> int: ...
    async def append(self, enrollments: list[Enrollment]) -> None: ...


def _encode(e: Enrollment) -> dict:
    return {
        "course_id": e.course_id,
        "title": e.title,
        "level": e.level,
        "lessons": e.lessons,
    }


def _lessons(raw: object) -> int:
    try:
        return int(raw or 0)  # type: ignore[call-overload]
    except (TypeError, ValueError):
        return 0


def _decode(raw: dict) -> Enrollment | None:
    course_id = raw.get("course_id")
    if not isinstance(course_id, (int, str)) or isinstance(course_id, bool):
        return None
    return Enrollment(
        course_id=course_id,
        title=str(raw.get("title", "")),
        level=str(raw.get("level", "beginner")),
        lessons=_lessons(raw.get("lessons")),
    )


class KVEnrollmentRepo:
    def __init__(self, store: KeyValueStore) -> None:
        self._store = store

    async def list_all(self) -> list[Enrollment]:
        rows = await read_json(self._store, ENROLLMENTS_KEY, [])
        enrollments: list[Enrollment] = []
        for raw in rows:
            enrollment = _decode(raw) if isinstance(raw, dict) else None
            if enrollment is None:
                logger.warning("Skipping stored enrollment without a usable course_id: %r", raw)
                continue
            enrollments.append(enrollment)
        return enrollments

    async def enroll(self, enrollment: Enrollment) -> bool:
        """Add an enrollment unless one for the same course already exists.

        Returns True when a record was written.
        """
        rows = await read_json(self._store, ENROLLMENTS_KEY, [])
        key = enrollment.course_key
        if any(
            isinstance(r, dict) and course_key(r.get("course_id")) == key for r in rows
        ):
            logger.debug("Enrollment for course=%s already present", key)
            return False
        rows.append(_encode(enrollment))
        await write_json(self._store, ENROLLMENTS_KEY, rows)
        logger.info("Enrolled course=%s title=%s", key, enrollment.title)
        return True

    async def unenroll(self, course_id: int | str) -> int:
        """Drop every enrollment for the course; returns how many were removed."""
        rows = await read_json(self._store, ENROLLMENTS_KEY, [])
        key = course_key(course_id)
        kept = [
            r
            for r in rows
            if not (isinstance(r, dict) and course_key(r.get("course_id")) == key)
        ]
        removed = len(rows) - len(kept)
        if removed:
            await write_json(self._store, ENROLLMENTS_KEY, kept)
            logger.info("Unenrolled course=%s removed=%d", key, removed)
        return removed

    async def append(self, enrollments: list[Enrollment]) -> None:
        """Append records as-is, without the per-course uniqueness check."""
        rows = await read_json(self._store, ENROLLMENTS_KEY, [])
        rows.extend(_encode(e) for e in enrollments)
        await write_json(self._store, ENROLLMENTS_KEY, rows)


enrollment_repo: EnrollmentRepo = KVEnrollmentRepo(kv_store)
