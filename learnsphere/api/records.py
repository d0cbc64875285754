"""Record-store write endpoints.

These are the collaborator-side mutations the analytics reports read:
assessment results, live-session attendance, course enrollments and
student registration.  Each one rewrites its whole collection.
"""

from __future__ import annotations

import datetime
import logging

from fastapi import APIRouter, HTTPException, Response, status
from pydantic import BaseModel, Field

from learnsphere.models.course import Enrollment
from learnsphere.models.user import ADMIN, STUDENT, User
from learnsphere.repos.attendance_repo import attendance_repo
from learnsphere.repos.enrollment_repo import enrollment_repo
from learnsphere.repos.live_session_repo import live_session_repo
from learnsphere.repos.submission_repo import submission_repo
from learnsphere.repos.user_repo import UserAlreadyExistsError, user_repo

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/records", tags=["records"])


class SubmissionIn(BaseModel):
    student_id: str = Field(min_length=1)
    course_id: str = Field(min_length=1)
    score: float = Field(ge=0, le=100, allow_inf_nan=False)
    completed: bool = False
    due_date: datetime.datetime | None = None


class SubmissionOut(BaseModel):
    id: int
    student_id: str
    course_id: str
    score: float
    completed: bool
    due_date: datetime.datetime | None


class SessionAttendanceIn(BaseModel):
    student_id: str = Field(min_length=1)
    session_id: str = Field(min_length=1)


class MarkAttendanceIn(SessionAttendanceIn):
    attended: bool


class AttendanceOut(BaseModel):
    student_id: str
    session_id: str
    enrolled: bool
    attended: bool
    date: str | None


class EnrollmentIn(BaseModel):
    course_id: str = Field(min_length=1)
    title: str
    level: str = "beginner"
    lessons: int = Field(default=0, ge=0)


class UserIn(BaseModel):
    name: str = "Student"
    email: str = Field(min_length=3)
    role: str = STUDENT


class UserOut(BaseModel):
    id: str
    name: str
    email: str
    role: str | None


@router.post(
    "/submissions",
    response_model=SubmissionOut,
    status_code=status.HTTP_201_CREATED,
)
async def add_submission(body: SubmissionIn) -> SubmissionOut:
    submission = await submission_repo.add(
        body.student_id,
        body.course_id,
        score=body.score,
        completed=body.completed,
        due_date=body.due_date,
    )
    return SubmissionOut(
        id=submission.id,
        student_id=body.student_id,
        course_id=body.course_id,
        score=submission.score,
        completed=submission.completed,
        due_date=submission.due_date,
    )


def _require_session(session_id: str) -> None:
    if live_session_repo.get(session_id) is None:
        logger.warning("Rejected attendance for unknown session=%s", session_id)
        raise HTTPException(status_code=404, detail="live session not found")


@router.post("/attendance/enroll", response_model=AttendanceOut)
async def enroll_in_live_session(body: SessionAttendanceIn) -> AttendanceOut:
    _require_session(body.session_id)
    record = await attendance_repo.enroll(body.student_id, body.session_id)
    return AttendanceOut(
        student_id=body.student_id,
        session_id=body.session_id,
        enrolled=record.enrolled,
        attended=record.attended,
        date=record.date,
    )


@router.post("/attendance/mark", response_model=AttendanceOut)
async def mark_attendance(body: MarkAttendanceIn) -> AttendanceOut:
    _require_session(body.session_id)
    record = await attendance_repo.mark(body.student_id, body.session_id, body.attended)
    return AttendanceOut(
        student_id=body.student_id,
        session_id=body.session_id,
        enrolled=record.enrolled,
        attended=record.attended,
        date=record.date,
    )


@router.post(
    "/enrollments",
    response_model=EnrollmentIn,
    status_code=status.HTTP_201_CREATED,
)
async def enroll_in_course(body: EnrollmentIn) -> EnrollmentIn:
    created = await enrollment_repo.enroll(
        Enrollment(
            course_id=body.course_id,
            title=body.title,
            level=body.level,
            lessons=body.lessons,
        )
    )
    if not created:
        raise HTTPException(status_code=409, detail="already enrolled")
    return body


@router.delete("/enrollments/{course_id}", status_code=status.HTTP_204_NO_CONTENT)
async def unenroll_from_course(course_id: str) -> Response:
    removed = await enrollment_repo.unenroll(course_id)
    if not removed:
        raise HTTPException(status_code=404, detail="enrollment not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/users", response_model=UserOut, status_code=status.HTTP_201_CREATED)
async def register_user(body: UserIn) -> UserOut:
    if body.role not in (STUDENT, ADMIN):
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="role must be student|admin",
        )
    user = User.new(name=body.name, email=body.email, role=body.role)
    if await user_repo.get_by_email(user.email) is not None:
        logger.warning("Rejected duplicate registration email=%s", user.email)
        raise HTTPException(status_code=409, detail="email already registered")
    try:
        await user_repo.add(user)
    except UserAlreadyExistsError:
        logger.warning("Rejected duplicate registration email=%s", user.email)
        raise HTTPException(status_code=409, detail="email already registered") from None
    return UserOut(id=user.id, name=user.name, email=user.email, role=user.role)
