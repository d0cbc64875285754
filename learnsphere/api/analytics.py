"""Learning-analytics report endpoints.

Every call loads a fresh snapshot of the record store; nothing is cached
between requests.  A course-catalog failure fails the whole report (503).
"""

from __future__ import annotations

import dataclasses
import logging
from typing import Annotated

from fastapi import APIRouter, HTTPException, Query, status
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel

from learnsphere.repos.course_repo import CourseFetchError
from learnsphere.services.analytics_service import analytics_service
from learnsphere.services.grading import calculate_grade
from learnsphere.services.report_export import courses_to_csv, students_to_csv

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/analytics", tags=["analytics"])


class CourseResultOut(BaseModel):
    course_id: str
    title: str
    grade: str | None
    score: int | None
    status: str
    compliance: str


class StudentReportOut(BaseModel):
    student_id: str
    student_name: str
    student_email: str
    courses_enrolled: str
    courses: list[CourseResultOut]
    grade: str | None
    score: int | None
    status: str
    compliance: str
    attendance: str


class AttendanceStatsOut(BaseModel):
    enrolled: int
    attended: int
    not_attended: int


class CourseReportOut(BaseModel):
    id: int | str
    title: str
    level: str
    categories: list[str]
    status: str
    type: str
    enrolled: int
    passed: int
    failed: int
    attendance_stats: AttendanceStatsOut | None


class SummaryStatsOut(BaseModel):
    total_courses: int
    total_enrolled: int
    total_passed: int
    total_failed: int
    total_students: int


class GradeOut(BaseModel):
    score: float
    grade: str


def _catalog_unavailable(exc: CourseFetchError) -> HTTPException:
    logger.warning("Analytics request failed: %s", exc)
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail="course catalog unavailable",
    )


@router.get("/students", response_model=list[StudentReportOut])
async def get_student_performance(
    course_id: Annotated[str | None, Query()] = None,
) -> list[StudentReportOut]:
    try:
        rows = await analytics_service.get_student_performance(course_id)
    except CourseFetchError as exc:
        raise _catalog_unavailable(exc) from None
    return [StudentReportOut(**dataclasses.asdict(r)) for r in rows]


@router.get("/courses", response_model=list[CourseReportOut])
async def get_course_performance() -> list[CourseReportOut]:
    try:
        rows = await analytics_service.get_course_performance()
    except CourseFetchError as exc:
        raise _catalog_unavailable(exc) from None
    return [CourseReportOut(**dataclasses.asdict(r)) for r in rows]


@router.get("/summary", response_model=SummaryStatsOut)
async def get_summary_stats() -> SummaryStatsOut:
    try:
        stats = await analytics_service.get_summary_stats()
    except CourseFetchError as exc:
        raise _catalog_unavailable(exc) from None
    return SummaryStatsOut(**dataclasses.asdict(stats))


@router.get("/students.csv", response_class=PlainTextResponse)
async def export_student_report(
    course_id: Annotated[str | None, Query()] = None,
) -> PlainTextResponse:
    try:
        rows = await analytics_service.get_student_performance(course_id)
    except CourseFetchError as exc:
        raise _catalog_unavailable(exc) from None
    return PlainTextResponse(
        students_to_csv(rows),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": 'attachment; filename="student-report.csv"'},
    )


@router.get("/courses.csv", response_class=PlainTextResponse)
async def export_course_report() -> PlainTextResponse:
    try:
        rows = await analytics_service.get_course_performance()
    except CourseFetchError as exc:
        raise _catalog_unavailable(exc) from None
    return PlainTextResponse(
        courses_to_csv(rows),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": 'attachment; filename="course-report.csv"'},
    )


@router.get("/grade", response_model=GradeOut)
def get_grade(score: Annotated[float, Query(ge=0, le=100)]) -> GradeOut:
    try:
        grade = calculate_grade(score)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)
        ) from None
    return GradeOut(score=score, grade=grade)
