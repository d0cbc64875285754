"""Request context middleware.

Gives every request an ID (the caller's X-Request-ID, or a fresh UUID)
held in a ContextVar, so every log line written while serving it carries
the same ``request_id``.  One summary line is logged per request; report
requests filtered by ``course_id`` carry it as ``course_filter``.  Probe
and scrape traffic is summarised at DEBUG.
"""

from __future__ import annotations

import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from learnsphere.core.logging import request_id_var

logger = logging.getLogger(__name__)

_QUIET_PATHS = frozenset({"/health", "/ready", "/metrics"})


class RequestContextMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        req_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        token = request_id_var.set(req_id)
        start = time.monotonic()
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)
        duration_ms = round((time.monotonic() - start) * 1000, 1)

        path = request.url.path
        extra: dict[str, object] = {
            "request_id": req_id,
            "method": request.method,
            "path": path,
            "status_code": response.status_code,
            "duration_ms": duration_ms,
        }
        course_filter = request.query_params.get("course_id")
        if course_filter:
            extra["course_filter"] = course_filter

        logger.log(
            logging.DEBUG if path in _QUIET_PATHS else logging.INFO,
            "%s %s → %d (%.1fms)",
            request.method,
            path,
            response.status_code,
            duration_ms,
            extra=extra,
        )

        response.headers["X-Request-ID"] = req_id
        return response
