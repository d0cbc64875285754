"""Prometheus metrics middleware.

Counts and times every HTTP request.  The ``endpoint`` label is the
matched route template (``/v1/records/enrollments/{course_id}``), not the
raw path, so per-course URLs do not create a new series each.  Requests
that match no route share the ``unmatched`` label.  The /metrics scrape
is not instrumented.
"""

from __future__ import annotations

import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.routing import Route

from learnsphere.core.metrics import ACTIVE_REQUESTS, REQUEST_COUNT, REQUEST_DURATION

_UNINSTRUMENTED = frozenset({"/metrics"})
UNMATCHED = "unmatched"


def _endpoint_label(request: Request) -> str:
    # The router stores the matched route in the scope while dispatching.
    route = request.scope.get("route")
    if isinstance(route, Route):
        return route.path
    return UNMATCHED


class MetricsMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in _UNINSTRUMENTED:
            return await call_next(request)

        start = time.monotonic()
        status_code = "500"
        with ACTIVE_REQUESTS.track_inprogress():
            try:
                response = await call_next(request)
                status_code = str(response.status_code)
                return response
            finally:
                endpoint = _endpoint_label(request)
                REQUEST_COUNT.labels(
                    method=request.method,
                    endpoint=endpoint,
                    status_code=status_code,
                ).inc()
                REQUEST_DURATION.labels(
                    method=request.method, endpoint=endpoint
                ).observe(time.monotonic() - start)
