from __future__ import annotations

import datetime
import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from learnsphere.db.kv_store import kv_store
from learnsphere.main import app
from learnsphere.models.course import Course, LiveSession
from learnsphere.models.submission import AttendanceRecord, Submission
from learnsphere.models.user import User
from learnsphere.repos.course_repo import course_repo
from learnsphere.services.snapshot import AnalyticsSnapshot

# Ensure repo root is on sys.path so `import learnsphere` works under pytest.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

NOW = datetime.datetime(2026, 3, 1, 12, 0, tzinfo=datetime.UTC)
YESTERDAY = NOW - datetime.timedelta(days=1)
NEXT_WEEK = NOW + datetime.timedelta(days=7)


@pytest.fixture(autouse=True)
def reset_record_store() -> None:
    """Clear stored collections between tests."""
    if hasattr(kv_store, "_store"):
        kv_store._store.clear()  # type: ignore[union-attr]


@pytest.fixture(autouse=True)
def reset_course_catalog() -> None:
    """Empty the course catalog and drop the artificial fetch delay."""
    course_repo._courses.clear()  # type: ignore[attr-defined]
    course_repo._delay_s = 0  # type: ignore[attr-defined]


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


# ---------------------------------------------------------------------------
# Snapshot builders
# ---------------------------------------------------------------------------


def student(n: int, name: str | None = None) -> User:
    return User.new(name=name or f"Student {n}", email=f"s{n}@example.com")


def course(cid: int, title: str | None = None, **kwargs) -> Course:
    return Course(id=cid, title=title or f"Course {cid}", **kwargs)


def done(score: float, sid: int = 1) -> Submission:
    """A completed submission that was due yesterday."""
    return Submission(id=sid, score=score, completed=True, due_date=YESTERDAY)


def overdue(score: float = 0, sid: int = 1) -> Submission:
    """An incomplete submission that was due yesterday."""
    return Submission(id=sid, score=score, completed=False, due_date=YESTERDAY)


def pending(score: float = 0, sid: int = 1) -> Submission:
    """An incomplete submission due next week."""
    return Submission(id=sid, score=score, completed=False, due_date=NEXT_WEEK)


def session(session_id: str, course_id: int | str) -> LiveSession:
    return LiveSession(
        id=session_id,
        title=f"Session {session_id}",
        course_id=course_id,
        start_time="2026-01-10T18:00:00+05:30",
    )


def attended(date: str) -> AttendanceRecord:
    return AttendanceRecord(enrolled=True, attended=True, date=date)


def absent() -> AttendanceRecord:
    return AttendanceRecord(enrolled=True, attended=False)


def snapshot(**kwargs) -> AnalyticsSnapshot:
    kwargs.setdefault("taken_at", NOW)
    return AnalyticsSnapshot.build(**kwargs)
