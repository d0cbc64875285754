from __future__ import annotations

from typing import Protocol

from learnsphere.models.course import LiveSession

# Scheduled live sessions.  Reference data: not editable at runtime.
_LIVE_SESSIONS: tuple[LiveSession, ...] = (
    LiveSession(
        id="ls-101",
        title="Intro to DSA – Live",
        course_id=1,
        start_time="2025-12-20T18:00:00+05:30",
    ),
    LiveSession(
        id="ls-102",
        title="System Design: Caching & Queues",
        course_id=1,
        start_time="2025-12-22T19:30:00+05:30",
    ),
    LiveSession(
        id="ls-103",
        title="Frontend Deep Dive: Performance",
        course_id=2,
        start_time="2025-12-25T17:00:00+05:30",
    ),
)


class LiveSessionRepo(Protocol):
    def list_all(self) -> list[LiveSession]: ...
    def get(self, session_id: str) -> LiveSession | None: ...


class StaticLiveSessionRepo:
    def __init__(self, sessions: tuple[LiveSession, ...] = _LIVE_SESSIONS) -> None:
        self._sessions = sessions

    def list_all(self) -> list[LiveSession]:
        return list(self._sessions)

    def get(self, session_id: str) -> LiveSession | None:
        return next((s for s in self._sessions if s.id == session_id), None)


live_session_repo: LiveSessionRepo = StaticLiveSessionRepo()
