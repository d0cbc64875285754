"""Operational endpoints: liveness, readiness and the Prometheus scrape.

/health always answers 200; ``degraded`` means alive but the record store
is not answering.  /ready answers 503 in that case, since every report
reads the store.  /metrics serves the text exposition format, not JSON.
"""

from __future__ import annotations

from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from learnsphere.db.kv_store import InMemoryKeyValueStore, kv_store

router = APIRouter(tags=["operations"])


@router.get("/health")
async def health() -> dict:
    if isinstance(kv_store, InMemoryKeyValueStore):
        return {"status": "ok", "checks": {"record_store": "in_memory"}}
    if await kv_store.ping():
        return {"status": "ok", "checks": {"record_store": "ok"}}
    return {"status": "degraded", "checks": {"record_store": "degraded"}}


@router.get("/ready")
async def ready() -> Response:
    ok = await kv_store.ping()
    return Response(status_code=200 if ok else 503)


@router.get("/metrics", include_in_schema=False)
async def metrics() -> Response:
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
