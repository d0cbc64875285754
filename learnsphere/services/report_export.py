"""CSV rendering of analytics report rows.

Column sets and header labels match the admin analytics screen's export
buttons.  Empty values (None, 0, "") render as empty cells.
"""

from __future__ import annotations

import csv
import io
from collections.abc import Iterable, Sequence

from learnsphere.models.report import AttendanceStats, CourseReportRow, StudentReportRow

STUDENT_COLUMNS: tuple[tuple[str, str], ...] = (
    ("student_name", "Student Name"),
    ("courses_enrolled", "Courses"),
    ("grade", "Grade"),
    ("score", "Score"),
    ("status", "Status"),
    ("compliance", "Compliance"),
    ("attendance", "Attendance Dates"),
)

COURSE_COLUMNS: tuple[tuple[str, str], ...] = (
    ("title", "Course Name"),
    ("type", "Type"),
    ("enrolled", "Total Enrolled"),
    ("passed", "Passed"),
    ("failed", "Failed"),
    ("attendance_stats", "Attendance (Enrolled/Attended)"),
)


def format_attendance_stats(stats: AttendanceStats | None) -> str:
    if stats is None:
        return "N/A"
    return f"{stats.enrolled}/{stats.attended}"


def _render(rows: Iterable[dict], columns: Sequence[tuple[str, str]]) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow([label for _, label in columns])
    for row in rows:
        writer.writerow([row.get(key) or "" for key, _ in columns])
    return buf.getvalue()


def students_to_csv(rows: Iterable[StudentReportRow]) -> str:
    return _render(
        (
            {
                "student_name": r.student_name,
                "courses_enrolled": r.courses_enrolled,
                "grade": r.grade,
                "score": r.score,
                "status": r.status,
                "compliance": r.compliance,
                "attendance": r.attendance,
            }
            for r in rows
        ),
        STUDENT_COLUMNS,
    )


def courses_to_csv(rows: Iterable[CourseReportRow]) -> str:
    return _render(
        (
            {
                "title": r.title,
                "type": r.type,
                "enrolled": r.enrolled,
                "passed": r.passed,
                "failed": r.failed,
                "attendance_stats": format_attendance_stats(r.attendance_stats),
            }
            for r in rows
        ),
        COURSE_COLUMNS,
    )
