"""Tests for Prometheus metrics middleware and the auth counters.

NOTE ON TESTING PROMETHEUS METRICS:
The prometheus-client library uses a global default registry.  Counters
can only go up; they cannot be reset between tests.  To avoid test
pollution, we assert on DELTAS: read the value before the action, perform
the action, read the value after, and assert the difference.
"""

from __future__ import annotations

from fastapi.testclient import TestClient
from prometheus_client import REGISTRY

from event_portal.models.admin import Admin
from tests.conftest import ADMIN_A_EMAIL, bearer, login, mint_token, seed_event


def _get_sample(name: str, labels: dict | None = None) -> float:
    """Read a metric sample's current value from the global registry."""
    value = REGISTRY.get_sample_value(name, labels=labels or {})
    return value if value is not None else 0.0


def _auth_event(event: str, outcome: str) -> float:
    return _get_sample("auth_events_total", {"event": event, "outcome": outcome})


def test_request_counter_increments(client: TestClient) -> None:
    """Each HTTP request should increment the request counter."""
    labels = {"method": "GET", "endpoint": "/health", "status_code": "200"}
    before = _get_sample("http_requests_total", labels)
    client.get("/health")
    after = _get_sample("http_requests_total", labels)
    assert after - before >= 1


def test_request_duration_histogram_observes(client: TestClient) -> None:
    """Each request should add an observation to the duration histogram."""
    labels = {"method": "GET", "endpoint": "/health"}
    before = _get_sample("http_request_duration_seconds_count", labels)
    client.get("/health")
    after = _get_sample("http_request_duration_seconds_count", labels)
    assert after - before >= 1


def test_endpoint_label_uses_route_template(client: TestClient, admin_a: Admin) -> None:
    """Event ids must not become label values."""
    event = seed_event(admin_a.id)
    labels = {"method": "GET", "endpoint": "/events/{event_id}", "status_code": "200"}
    before = _get_sample("http_requests_total", labels)
    client.get(f"/events/{event.id}", headers=bearer(mint_token(admin_a)))
    after = _get_sample("http_requests_total", labels)
    assert after - before == 1


def test_metrics_endpoint_returns_prometheus_format(client: TestClient) -> None:
    """GET /metrics should return Prometheus text exposition format."""
    client.get("/health")
    resp = client.get("/metrics")
    assert resp.status_code == 200
    assert "http_requests_total" in resp.text
    assert "auth_events_total" in resp.text


def test_metrics_endpoint_not_self_instrumented(client: TestClient) -> None:
    """Requests to /metrics itself should not be counted in metrics."""
    labels = {"method": "GET", "endpoint": "/metrics", "status_code": "200"}
    before = _get_sample("http_requests_total", labels)
    client.get("/metrics")
    client.get("/metrics")
    assert _get_sample("http_requests_total", labels) == before


# ---- auth lifecycle counters ----


def test_login_outcomes_counted(client: TestClient, admin_a: Admin) -> None:
    ok_before = _auth_event("login", "success")
    bad_before = _auth_event("login", "invalid_credentials")

    login(client)
    client.post("/auth/login", json={"email": ADMIN_A_EMAIL, "password": "wrong-pass"})

    assert _auth_event("login", "success") - ok_before == 1
    assert _auth_event("login", "invalid_credentials") - bad_before == 1


def test_refresh_replay_counted_as_not_found(client: TestClient, admin_a: Admin) -> None:
    token = login(client)["refreshToken"]
    client.post("/auth/refresh", json={"refreshToken": token})

    before = _auth_event("refresh", "not_found")
    client.post("/auth/refresh", json={"refreshToken": token})
    assert _auth_event("refresh", "not_found") - before == 1


def test_rate_limit_hits_counted(client: TestClient) -> None:
    before = _get_sample("rate_limit_hits_total", {"key_type": "ip"})
    for _ in range(12):
        client.post("/auth/login", json={"email": "nobody@x.com", "password": "wrong-pass"})
    assert _get_sample("rate_limit_hits_total", {"key_type": "ip"}) - before >= 1
