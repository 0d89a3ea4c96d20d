"""Assert that passwords and tokens never appear in log output.

These tests exercise endpoints that handle sensitive data and verify
the log records contain no leaked secrets.
"""

from __future__ import annotations

import logging

import pytest
from fastapi.testclient import TestClient

from event_portal.models.admin import Admin
from tests.conftest import ADMIN_A_EMAIL, PASSWORD, bearer, login, mint_token, seed_event

WRONG_PASSWORD = "super-s3cret-p@ssw0rd!"


def _all_log_text(caplog: pytest.LogCaptureFixture) -> str:
    return " ".join(caplog.messages)


def test_failed_login_does_not_log_password(
    client: TestClient, admin_a: Admin, caplog: pytest.LogCaptureFixture
) -> None:
    with caplog.at_level(logging.DEBUG):
        client.post("/auth/login", json={"email": ADMIN_A_EMAIL, "password": WRONG_PASSWORD})

    assert WRONG_PASSWORD not in _all_log_text(caplog), "Password found in log output!"


def test_successful_login_does_not_log_password_or_tokens(
    client: TestClient, admin_a: Admin, caplog: pytest.LogCaptureFixture
) -> None:
    with caplog.at_level(logging.DEBUG):
        data = login(client)

    text = _all_log_text(caplog)
    assert PASSWORD not in text, "Password found in log output!"
    assert data["accessToken"] not in text, "Access token found in log output!"
    assert data["refreshToken"] not in text, "Refresh token found in log output!"


def test_refresh_does_not_log_tokens(
    client: TestClient, admin_a: Admin, caplog: pytest.LogCaptureFixture
) -> None:
    old = login(client)["refreshToken"]

    with caplog.at_level(logging.DEBUG):
        new = client.post("/auth/refresh", json={"refreshToken": old}).json()
        client.post("/auth/refresh", json={"refreshToken": old})

    text = _all_log_text(caplog)
    assert old not in text
    assert new["refreshToken"] not in text
    assert new["accessToken"] not in text


def test_register_does_not_log_password(
    client: TestClient, caplog: pytest.LogCaptureFixture
) -> None:
    with caplog.at_level(logging.DEBUG):
        client.post("/auth/register", json={"email": "new@x.com", "password": WRONG_PASSWORD})

    assert WRONG_PASSWORD not in _all_log_text(caplog)


def test_step_up_failure_does_not_log_password(
    client: TestClient, admin_a: Admin, caplog: pytest.LogCaptureFixture
) -> None:
    event = seed_event(admin_a.id)
    with caplog.at_level(logging.DEBUG):
        client.request(
            "DELETE",
            f"/events/{event.id}",
            headers=bearer(mint_token(admin_a)),
            json={"password": WRONG_PASSWORD},
        )

    assert WRONG_PASSWORD not in _all_log_text(caplog)
