"""Demo: seed the demo data set and print the three analytics reports.

Run with:
    python scripts/demo_analytics_report.py
"""

from __future__ import annotations

import asyncio

from fastapi.testclient import TestClient

from learnsphere.main import app
from learnsphere.services.seed import seed_demo_data


def main() -> None:
    asyncio.run(seed_demo_data())
    client = TestClient(app)

    # ── Summary ─────────────────────────────────────────────────────
    r = client.get("/v1/analytics/summary")
    s = r.json()
    print(f"1. GET /v1/analytics/summary  → {r.status_code}")
    print(
        f"   courses={s['total_courses']} enrolled={s['total_enrolled']} "
        f"passed={s['total_passed']} failed={s['total_failed']} "
        f"students={s['total_students']}"
    )

    # ── Students ────────────────────────────────────────────────────
    r = client.get("/v1/analytics/students")
    print(f"2. GET /v1/analytics/students → {r.status_code}")
    for row in r.json():
        print(
            f"   {row['student_name']:<18} {row['grade'] or '-':<2} "
            f"{row['score'] if row['score'] is not None else '-':>4} "
            f"{row['status']:<12} {row['compliance']:<14} {row['attendance']}"
        )

    # ── Courses ─────────────────────────────────────────────────────
    r = client.get("/v1/analytics/courses")
    print(f"3. GET /v1/analytics/courses  → {r.status_code}")
    for row in r.json():
        stats = row["attendance_stats"]
        attendance = f"{stats['enrolled']}/{stats['attended']}" if stats else "N/A"
        print(
            f"   {row['title']:<22} {row['type']:<10} enrolled={row['enrolled']:<3} "
            f"passed={row['passed']:<3} failed={row['failed']:<3} attendance={attendance}"
        )

    # ── CSV export ──────────────────────────────────────────────────
    r = client.get("/v1/analytics/courses.csv")
    print(f"4. GET /v1/analytics/courses.csv → {r.status_code}")
    print(r.text)


if __name__ == "__main__":
    main()
