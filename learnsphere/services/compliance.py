from __future__ import annotations

import datetime
from collections.abc import Mapping, Sequence

from learnsphere.models.course import course_key
from learnsphere.models.submission import Submission

COMPLIANT = "Compliant"
NON_COMPLIANT = "Non-Compliant"
NOT_APPLICABLE = "N/A"


def check_compliance(
    student_id: str,
    course_id: int | str,
    submissions: Mapping[str, Mapping[str, Sequence[Submission]]],
    now: datetime.datetime | None = None,
) -> str:
    """Non-Compliant iff some submission is past due and not completed.

    A (student, course) pair with no submissions is Compliant.
    """
    course_submissions = submissions.get(student_id, {}).get(course_key(course_id), ())
    if not course_submissions:
        return COMPLIANT

    now = now or datetime.datetime.now(datetime.UTC)
    if any(s.is_overdue(now) for s in course_submissions):
        return NON_COMPLIANT
    return COMPLIANT
