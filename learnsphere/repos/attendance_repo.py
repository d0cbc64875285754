from __future__ import annotations

import datetime
import logging
from typing import Protocol

from learnsphere.db.kv_store import KeyValueStore, kv_store, read_json, write_json
from learnsphere.models.submission import AttendanceRecord

logger = logging.getLogger(__name__)

ATTENDANCE_KEY = "learnsphere_attendance"

# student_id -> session_id -> record
AttendanceMap = dict[str, dict[str, AttendanceRecord]]


class AttendanceRepo(Protocol):
    async def fetch_all(self) -> AttendanceMap: ...
    async def enroll(self, student_id: str, session_id: str) -> AttendanceRecord: ...
    async def mark(
        self, student_id: str, session_id: str, attended: bool
    ) -> AttendanceRecord: ...


def _decode(raw: dict) -> AttendanceRecord:
    return AttendanceRecord(
        enrolled=bool(raw.get("enrolled", False)),
        attended=bool(raw.get("attended", False)),
        date=str(raw["date"]) if raw.get("date") else None,
    )


def _encode(r: AttendanceRecord) -> dict:
    return {"enrolled": r.enrolled, "attended": r.attended, "date": r.date}


class KVAttendanceRepo:
    def __init__(self, store: KeyValueStore) -> None:
        self._store = store

    async def fetch_all(self) -> AttendanceMap:
        stored = await read_json(self._store, ATTENDANCE_KEY, {})
        result: AttendanceMap = {}
        for student_id, by_session in stored.items():
            if not isinstance(by_session, dict):
                logger.warning("Skipping malformed attendance for student=%s", student_id)
                continue
            result[student_id] = {
                session_id: _decode(raw)
                for session_id, raw in by_session.items()
                if isinstance(raw, dict)
            }
        return result

    async def enroll(self, student_id: str, session_id: str) -> AttendanceRecord:
        """Register the student for a session, resetting any prior attendance."""
        record = AttendanceRecord(enrolled=True, attended=False)
        stored = await read_json(self._store, ATTENDANCE_KEY, {})
        stored.setdefault(student_id, {})[session_id] = _encode(record)
        await write_json(self._store, ATTENDANCE_KEY, stored)
        logger.info("Enrolled student=%s in session=%s", student_id, session_id)
        return record

    async def mark(
        self,
        student_id: str,
        session_id: str,
        attended: bool,
        *,
        on: datetime.date | None = None,
    ) -> AttendanceRecord:
        """Set attendance, enrolling the student first when no record exists."""
        stored = await read_json(self._store, ATTENDANCE_KEY, {})
        by_session = stored.setdefault(student_id, {})
        current = by_session.get(session_id)
        record = _decode(current) if isinstance(current, dict) else None
        if record is None:
            record = AttendanceRecord(enrolled=True, attended=False)

        if attended:
            day = on or datetime.datetime.now(datetime.UTC).date()
            record = AttendanceRecord(
                enrolled=record.enrolled, attended=True, date=day.isoformat()
            )
        else:
            record = AttendanceRecord(enrolled=record.enrolled, attended=False)

        by_session[session_id] = _encode(record)
        await write_json(self._store, ATTENDANCE_KEY, stored)
        logger.info(
            "Marked attendance student=%s session=%s attended=%s",
            student_id,
            session_id,
            attended,
        )
        return record

    async def replace_all(self, attendance: AttendanceMap) -> None:
        await write_json(
            self._store,
            ATTENDANCE_KEY,
            {
                sid: {sess: _encode(r) for sess, r in by_session.items()}
                for sid, by_session in attendance.items()
            },
        )


attendance_repo = KVAttendanceRepo(kv_store)
