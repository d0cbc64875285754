from __future__ import annotations

import datetime
import logging
import math
from typing import Protocol

from learnsphere.core.metrics import STORE_DECODE_FAILURES
from learnsphere.db.kv_store import KeyValueStore, kv_store, read_json, write_json
from learnsphere.models.course import course_key
from learnsphere.models.submission import Submission

logger = logging.getLogger(__name__)

SUBMISSIONS_KEY = "learnsphere_assessments"

# student_id -> course_id -> submissions, in insertion order
SubmissionMap = dict[str, dict[str, list[Submission]]]


class SubmissionRepo(Protocol):
    async def fetch_all(self) -> SubmissionMap: ...
    async def add(
        self,
        student_id: str,
        course_id: int | str,
        *,
        score: float,
        completed: bool = False,
        due_date: datetime.datetime | None = None,
    ) -> Submission: ...


def _parse_due_date(raw: object) -> datetime.datetime | None:
    if not raw:
        return None
    try:
        parsed = datetime.datetime.fromisoformat(str(raw))
    except ValueError:
        logger.debug("Ignoring unparsable due date %r", raw)
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=datetime.UTC)
    return parsed


def _row_id(raw: dict) -> int:
    try:
        return int(raw.get("id") or 0)
    except (TypeError, ValueError):
        return 0


def _decode(raw: dict) -> Submission | None:
    """Build a Submission from a stored row, or None when the score is unusable."""
    try:
        score = float(raw.get("score") or 0)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(score):
        return None
    return Submission(
        id=_row_id(raw),
        score=score,
        completed=bool(raw.get("completed", False)),
        due_date=_parse_due_date(raw.get("due_date")),
    )


def _decode_rows(student_id: str, course_id: str, rows: list) -> list[Submission]:
    decoded: list[Submission] = []
    for raw in rows:
        submission = _decode(raw) if isinstance(raw, dict) else None
        if submission is None:
            logger.warning(
                "Skipping malformed submission student=%s course=%s: %r",
                student_id,
                course_id,
                raw,
            )
            STORE_DECODE_FAILURES.labels(key=SUBMISSIONS_KEY).inc()
            continue
        decoded.append(submission)
    return decoded


def _encode(s: Submission) -> dict:
    return {
        "id": s.id,
        "score": s.score,
        "completed": s.completed,
        "due_date": s.due_date.isoformat() if s.due_date else None,
    }


class KVSubmissionRepo:
    def __init__(self, store: KeyValueStore) -> None:
        self._store = store

    async def fetch_all(self) -> SubmissionMap:
        stored = await read_json(self._store, SUBMISSIONS_KEY, {})
        result: SubmissionMap = {}
        for student_id, by_course in stored.items():
            if not isinstance(by_course, dict):
                logger.warning("Skipping malformed submissions for student=%s", student_id)
                continue
            result[student_id] = {
                course_key(cid): _decode_rows(student_id, course_key(cid), rows)
                for cid, rows in by_course.items()
                if isinstance(rows, list)
            }
        return result

    async def add(
        self,
        student_id: str,
        course_id: int | str,
        *,
        score: float,
        completed: bool = False,
        due_date: datetime.datetime | None = None,
    ) -> Submission:
        stored = await read_json(self._store, SUBMISSIONS_KEY, {})
        rows = stored.setdefault(student_id, {}).setdefault(course_key(course_id), [])
        next_id = max((_row_id(r) for r in rows if isinstance(r, dict)), default=0) + 1
        submission = Submission(
            id=next_id, score=score, completed=completed, due_date=due_date
        )
        rows.append(_encode(submission))
        await write_json(self._store, SUBMISSIONS_KEY, stored)
        logger.info(
            "Recorded submission student=%s course=%s id=%d completed=%s",
            student_id,
            course_id,
            submission.id,
            completed,
        )
        return submission

    async def replace_all(self, submissions: SubmissionMap) -> None:
        await write_json(
            self._store,
            SUBMISSIONS_KEY,
            {
                sid: {cid: [_encode(s) for s in rows] for cid, rows in by_course.items()}
                for sid, by_course in submissions.items()
            },
        )


submission_repo = KVSubmissionRepo(kv_store)
