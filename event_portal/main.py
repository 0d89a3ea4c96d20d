from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from event_portal.api.auth import router as auth_router
from event_portal.api.errors import register_exception_handlers
from event_portal.api.events import router as events_router
from event_portal.api.health import router as health_router
from event_portal.api.metrics_endpoint import router as metrics_router
from event_portal.api.uploads import router as uploads_router
from event_portal.core.config import SETTINGS
from event_portal.core.logging import setup_logging
from event_portal.db.engine import lifespan_db
from event_portal.db.redis import lifespan_redis
from event_portal.middleware.metrics import MetricsMiddleware
from event_portal.middleware.request_context import (
    RequestContextMiddleware,
    install_log_filter,
)

# Configure logging before anything else runs.  setup_logging replaces the
# root handlers, so the request-context filter is re-attached after it.
setup_logging(SETTINGS.log_level, json_format=SETTINGS.log_json)
install_log_filter()

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    # Teardown runs in reverse order (Redis, then the database engine)
    async with lifespan_db():
        async with lifespan_redis():
            yield


# only app setup + router registration

app = FastAPI(
    title="event-portal",
    lifespan=lifespan,
    docs_url="/docs" if SETTINGS.is_dev else None,
    redoc_url="/redoc" if SETTINGS.is_dev else None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(SETTINGS.cors_origins),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Last-added runs first: RequestContext -> Metrics -> CORS -> route
app.add_middleware(MetricsMiddleware)
app.add_middleware(RequestContextMiddleware)

register_exception_handlers(app)

app.include_router(metrics_router)
app.include_router(health_router)
app.include_router(auth_router)
app.include_router(events_router)
app.include_router(uploads_router)

logger.info(
    "event-portal started  env=%s log_level=%s port=%d docs=%s",
    SETTINGS.app_env,
    SETTINGS.log_level,
    SETTINGS.port,
    "on" if SETTINGS.is_dev else "off",
)
