"""Prometheus metrics inventory.

Every metric the service exports is defined here; the modules that own
the behavior import and increment them at the point of action.

HTTP metrics are populated by MetricsMiddleware.  AUTH_EVENTS tracks the
token lifecycle so dashboards can answer questions the request counter
cannot, e.g. "how many refreshes were refused because the token had
already been rotated?"  A spike there means stolen refresh tokens are
being replayed.
"""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram

# ---------------------------------------------------------------------------
# HTTP metrics (populated by the MetricsMiddleware)
# ---------------------------------------------------------------------------

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests by method, endpoint, and status code",
    ["method", "endpoint", "status_code"],
)

REQUEST_DURATION = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    # Login and step-up requests include an Argon2 verification (~50-100ms),
    # so the upper buckets matter more here than for a pure CRUD API.
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)

ACTIVE_REQUESTS = Gauge(
    "http_active_requests",
    "Number of HTTP requests currently being processed",
)

# ---------------------------------------------------------------------------
# Application-specific metrics
# ---------------------------------------------------------------------------

RATE_LIMIT_HITS = Counter(
    "rate_limit_hits_total",
    "Requests rejected by rate limiting (429s)",
    ["key_type"],  # "ip"
)

AUTH_EVENTS = Counter(
    "auth_events_total",
    "Token lifecycle events by outcome",
    # event:   login | refresh | logout | step_up
    # outcome: success | invalid_credentials | invalid_token | expired |
    #          not_found | invalid_password
    ["event", "outcome"],
)

UPLOADS = Counter(
    "poster_uploads_total",
    "Poster upload attempts by outcome",
    ["outcome"],  # "stored" or "rejected"
)
