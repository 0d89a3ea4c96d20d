"""Request context middleware: assigns a unique ID to every request.

Concurrent requests interleave their log lines; the request ID ties the
lines of one request together (e.g. the "refresh token rejected" warning
and the 401 summary line that follows it).

The ID lives in a ContextVar rather than a thread-local: FastAPI runs many
requests on the same thread, and each asyncio task gets its own copy of
the context variable.
"""

from __future__ import annotations

import logging
import time
import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger(__name__)

request_id_var: ContextVar[str] = ContextVar("request_id", default="-")
admin_id_var: ContextVar[str] = ContextVar("admin_id", default="-")


class _RequestContextFilter(logging.Filter):
    """Injects request_id and admin_id into every LogRecord.

    A filter (not a formatter) because only filters can add fields to
    the record before it is formatted.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get("-")  # type: ignore[attr-defined]
        if not hasattr(record, "admin_id"):
            record.admin_id = admin_id_var.get("-")  # type: ignore[attr-defined]
        return True


_context_filter = _RequestContextFilter()


def install_log_filter() -> None:
    """Attach the context filter to the root logger and its handlers.

    Root-logger filters only see records logged directly on the root, so the
    filter also goes on every root handler (records from child loggers pass
    through those).  Safe to call more than once.
    """
    root_logger = logging.getLogger()
    if _context_filter not in root_logger.filters:
        root_logger.addFilter(_context_filter)
    for handler in root_logger.handlers:
        if _context_filter not in handler.filters:
            handler.addFilter(_context_filter)


install_log_filter()


def bind_admin(admin_id: str) -> None:
    """Record the authenticated admin for the rest of this request's logs."""
    admin_id_var.set(admin_id)


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Assigns a request ID, times requests, and logs completion.

    1. Reads X-Request-ID (if the client sent one) or generates a UUID
    2. Stores it in a ContextVar
    3. Times the request
    4. Logs a summary line (method, path, status, duration)
    5. Echoes X-Request-ID on the response
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        req_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        request_id_var.set(req_id)
        admin_id_var.set("-")

        start = time.monotonic()
        response = await call_next(request)
        duration_ms = round((time.monotonic() - start) * 1000, 1)

        logger.info(
            "%s %s → %d (%.1fms)",
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
            extra={
                "request_id": req_id,
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": duration_ms,
            },
        )

        response.headers["X-Request-ID"] = req_id
        return response
