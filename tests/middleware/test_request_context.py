"""Every response carries an X-Request-ID, and each request is logged once."""

from __future__ import annotations

import logging
import uuid

import pytest
from fastapi.testclient import TestClient


def test_request_id_generated_when_not_provided(client: TestClient) -> None:
    resp = client.get("/health")
    req_id = resp.headers.get("x-request-id")
    assert req_id is not None
    uuid.UUID(req_id)


def test_request_id_echoed_when_provided(client: TestClient) -> None:
    custom_id = "my-custom-request-id-123"
    resp = client.get("/health", headers={"X-Request-ID": custom_id})
    assert resp.headers.get("x-request-id") == custom_id


def test_request_id_present_on_error_responses(client: TestClient) -> None:
    resp = client.get("/v1/analytics/grade", params={"score": 250})
    assert resp.status_code == 422
    assert resp.headers.get("x-request-id") is not None


def test_request_summary_is_logged(
    client: TestClient, caplog: pytest.LogCaptureFixture
) -> None:
    with caplog.at_level(logging.INFO, logger="learnsphere.middleware.request_context"):
        client.get("/v1/analytics/summary", headers={"X-Request-ID": "req-42"})

    (record,) = [
        r for r in caplog.records if r.name == "learnsphere.middleware.request_context"
    ]
    assert record.request_id == "req-42"
    assert record.path == "/v1/analytics/summary"
    assert record.status_code == 200


def test_course_filter_is_logged(
    client: TestClient, caplog: pytest.LogCaptureFixture
) -> None:
    with caplog.at_level(logging.INFO, logger="learnsphere.middleware.request_context"):
        client.get("/v1/analytics/students", params={"course_id": "3"})

    (record,) = [
        r for r in caplog.records if r.name == "learnsphere.middleware.request_context"
    ]
    assert record.course_filter == "3"


def test_probes_are_logged_at_debug(
    client: TestClient, caplog: pytest.LogCaptureFixture
) -> None:
    with caplog.at_level(logging.INFO, logger="learnsphere.middleware.request_context"):
        client.get("/health")

    assert not [
        r for r in caplog.records if r.name == "learnsphere.middleware.request_context"
    ]
