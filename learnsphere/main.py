from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from learnsphere.api.analytics import router as analytics_router
from learnsphere.api.health import router as health_router
from learnsphere.api.records import router as records_router
from learnsphere.core.config import SETTINGS
from learnsphere.core.logging import setup_logging
from learnsphere.db.kv_store import lifespan_store
from learnsphere.middleware.metrics import MetricsMiddleware
from learnsphere.middleware.request_context import RequestContextMiddleware
from learnsphere.services.seed import seed_demo_data

# Configure logging before anything else runs.
setup_logging(SETTINGS.log_level, json_format=SETTINGS.log_json)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    async with lifespan_store():
        if SETTINGS.seed_demo_data:
            await seed_demo_data()
        yield


app = FastAPI(
    title="learnsphere-analytics",
    lifespan=lifespan,
    docs_url="/docs" if SETTINGS.is_dev else None,
    redoc_url="/redoc" if SETTINGS.is_dev else None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Last-added runs first: RequestContext → Metrics → CORS → route handler,
# so every request has an ID before metrics are recorded.
app.add_middleware(MetricsMiddleware)
app.add_middleware(RequestContextMiddleware)

app.include_router(analytics_router)
app.include_router(health_router)
app.include_router(records_router)

logger.info(
    "learnsphere-analytics started  env=%s log_level=%s port=%d docs=%s",
    SETTINGS.app_env,
    SETTINGS.log_level,
    SETTINGS.port,
    "on" if SETTINGS.is_dev else "off",
)
