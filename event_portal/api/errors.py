from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from event_portal.services.errors import IdentityMissingError, PortalError

logger = logging.getLogger(__name__)


def register_exception_handlers(app: FastAPI) -> None:
    """Render domain errors as ``{"detail": message}`` with their status."""

    @app.exception_handler(PortalError)
    async def handle_portal_error(request: Request, exc: PortalError) -> JSONResponse:
        log_fn = logger.error if exc.status_code >= 500 else logger.info
        log_fn(
            "%s on %s %s: %s",
            type(exc).__name__,
            request.method,
            request.url.path,
            exc.message,
        )
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.message},
            headers=exc.headers,
        )

    @app.exception_handler(IdentityMissingError)
    async def handle_identity_missing(
        request: Request, exc: IdentityMissingError
    ) -> JSONResponse:
        logger.error("Consistency fault on %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})
