from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from learnsphere.repos.course_repo import course_repo
from tests.conftest import course


@pytest.fixture
def algebra() -> None:
    course_repo.add(course(1, "Algebra"))


def _register(client: TestClient, email: str = "ada@example.com", **body) -> dict:
    resp = client.post("/v1/records/users", json={"name": "Ada", "email": email, **body})
    assert resp.status_code == 201
    return resp.json()


# ---- users ----


def test_register_user(client: TestClient) -> None:
    user = _register(client, email="Ada@Example.com")
    assert user == {
        "id": "ada@example.com",
        "name": "Ada",
        "email": "ada@example.com",
        "role": "student",
    }


def test_register_duplicate_email_is_rejected(client: TestClient) -> None:
    _register(client)
    resp = client.post("/v1/records/users", json={"email": "ADA@example.com"})
    assert resp.status_code == 409


def test_register_unknown_role_is_rejected(client: TestClient) -> None:
    resp = client.post("/v1/records/users", json={"email": "x@example.com", "role": "owner"})
    assert resp.status_code == 422


# ---- submissions ----


@pytest.mark.usefixtures("algebra")
def test_submission_shows_up_in_report(client: TestClient) -> None:
    _register(client)
    _register(client, email="root@example.com", role="admin")

    resp = client.post(
        "/v1/records/submissions",
        json={"student_id": "ada@example.com", "course_id": "1", "score": 84, "completed": True},
    )
    assert resp.status_code == 201
    assert resp.json()["id"] == 1

    rows = client.get("/v1/analytics/students").json()
    assert [r["student_id"] for r in rows] == ["ada@example.com"]
    assert (rows[0]["grade"], rows[0]["score"], rows[0]["status"]) == ("A", 84, "Completed")


@pytest.mark.parametrize("score", [101, -5])
def test_submission_score_out_of_range(client: TestClient, score: int) -> None:
    resp = client.post(
        "/v1/records/submissions",
        json={"student_id": "ada@example.com", "course_id": "1", "score": score},
    )
    assert resp.status_code == 422


@pytest.mark.usefixtures("algebra")
def test_overdue_submission_makes_student_non_compliant(client: TestClient) -> None:
    _register(client)
    client.post(
        "/v1/records/submissions",
        json={
            "student_id": "ada@example.com",
            "course_id": "1",
            "score": 0,
            "due_date": "2020-01-01T00:00:00Z",
        },
    )
    (row,) = client.get("/v1/analytics/students").json()
    assert row["compliance"] == "Non-Compliant"
    assert row["status"] == "Enrolled"


# ---- attendance ----


def test_mark_attendance(client: TestClient) -> None:
    resp = client.post(
        "/v1/records/attendance/mark",
        json={"student_id": "ada@example.com", "session_id": "ls-101", "attended": True},
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["enrolled"] is True
    assert data["attended"] is True
    assert data["date"] is not None


def test_enroll_in_live_session(client: TestClient) -> None:
    resp = client.post(
        "/v1/records/attendance/enroll",
        json={"student_id": "ada@example.com", "session_id": "ls-103"},
    )
    assert resp.status_code == 200
    assert (resp.json()["enrolled"], resp.json()["attended"]) == (True, False)


@pytest.mark.parametrize("action", ["enroll", "mark"])
def test_attendance_for_unknown_session_is_rejected(client: TestClient, action: str) -> None:
    resp = client.post(
        f"/v1/records/attendance/{action}",
        json={"student_id": "ada@example.com", "session_id": "ls-999", "attended": True},
    )
    assert resp.status_code == 404


# ---- enrollments ----


def test_enroll_and_unenroll(client: TestClient) -> None:
    body = {"course_id": "2", "title": "Biology", "lessons": 12}
    assert client.post("/v1/records/enrollments", json=body).status_code == 201
    assert client.post("/v1/records/enrollments", json=body).status_code == 409

    assert client.delete("/v1/records/enrollments/2").status_code == 204
    assert client.delete("/v1/records/enrollments/2").status_code == 404
