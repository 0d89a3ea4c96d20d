"""Credential endpoint tests: /auth/register, /auth/login, /auth/me.

Login answers a wrong password and an unknown email identically, so the
endpoint cannot be used to discover which emails have accounts.
"""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from event_portal.db import stores as stores_module
from event_portal.models.admin import Admin
from tests.conftest import ADMIN_A_EMAIL, PASSWORD, bearer, login, mint_token, run

# ---------------------------------------------------------------------------
# Registration
# ---------------------------------------------------------------------------


def test_register_returns_id_and_email_without_tokens(client: TestClient) -> None:
    resp = client.post("/auth/register", json={"email": "New@X.com ", "password": PASSWORD})
    assert resp.status_code == 201
    body = resp.json()
    assert set(body) == {"id", "email"}
    assert body["email"] == "new@x.com"


def test_register_stores_argon2_hash_not_password(client: TestClient) -> None:
    client.post("/auth/register", json={"email": "hash@x.com", "password": PASSWORD})
    admin = run(stores_module.admin_repo.get_by_email("hash@x.com"))
    assert admin is not None
    assert admin.password_hash.startswith("$argon2")
    assert PASSWORD not in admin.password_hash


def test_register_duplicate_email_is_409(client: TestClient, admin_a: Admin) -> None:
    resp = client.post("/auth/register", json={"email": ADMIN_A_EMAIL, "password": PASSWORD})
    assert resp.status_code == 409
    assert resp.json() == {"detail": "Email already registered"}


@pytest.mark.parametrize(
    "payload",
    [
        {"email": "not-an-email", "password": PASSWORD},
        {"email": "short@x.com", "password": "1234567"},
        {"email": "missing@x.com"},
    ],
)
def test_register_rejects_bad_payloads(client: TestClient, payload: dict) -> None:
    resp = client.post("/auth/register", json=payload)
    assert resp.status_code == 422


def test_registered_admin_can_log_in(client: TestClient) -> None:
    client.post("/auth/register", json={"email": "fresh@x.com", "password": PASSWORD})
    data = login(client, "fresh@x.com")
    assert data["admin"]["email"] == "fresh@x.com"


# ---------------------------------------------------------------------------
# Login
# ---------------------------------------------------------------------------


def test_login_returns_token_pair_and_admin(client: TestClient, admin_a: Admin) -> None:
    resp = client.post("/auth/login", json={"email": ADMIN_A_EMAIL, "password": PASSWORD})
    assert resp.status_code == 200
    body = resp.json()
    assert body["accessToken"]
    assert body["refreshToken"]
    assert body["accessToken"] != body["refreshToken"]
    assert body["admin"] == {"id": str(admin_a.id), "email": ADMIN_A_EMAIL}


def test_login_records_refresh_token_in_ledger(client: TestClient, admin_a: Admin) -> None:
    body = login(client)
    record = run(stores_module.refresh_token_repo.get_by_token(body["refreshToken"]))
    assert record is not None
    assert record.admin_id == admin_a.id


def test_login_email_is_case_insensitive(client: TestClient, admin_a: Admin) -> None:
    resp = client.post("/auth/login", json={"email": "A@X.COM", "password": PASSWORD})
    assert resp.status_code == 200


def test_wrong_password_and_unknown_email_are_indistinguishable(
    client: TestClient, admin_a: Admin
) -> None:
    wrong_pw = client.post("/auth/login", json={"email": ADMIN_A_EMAIL, "password": "nope-nope"})
    no_user = client.post("/auth/login", json={"email": "ghost@x.com", "password": "nope-nope"})

    assert wrong_pw.status_code == no_user.status_code == 401
    assert wrong_pw.json() == no_user.json() == {"detail": "Invalid credentials"}


def test_failed_login_issues_no_refresh_token(client: TestClient, admin_a: Admin) -> None:
    client.post("/auth/login", json={"email": ADMIN_A_EMAIL, "password": "nope-nope"})
    assert stores_module.refresh_token_repo._by_token == {}


# ---------------------------------------------------------------------------
# /auth/me and the session validator
# ---------------------------------------------------------------------------


def test_me_returns_identity(client: TestClient, admin_a: Admin) -> None:
    access = login(client)["accessToken"]
    resp = client.get("/auth/me", headers=bearer(access))
    assert resp.status_code == 200
    assert resp.json() == {"id": str(admin_a.id), "email": ADMIN_A_EMAIL}


def test_me_without_token_is_401_with_bearer_challenge(client: TestClient) -> None:
    resp = client.get("/auth/me")
    assert resp.status_code == 401
    assert resp.headers["www-authenticate"] == "Bearer"


def test_me_with_garbage_token_is_401(client: TestClient) -> None:
    resp = client.get("/auth/me", headers=bearer("not.a.jwt"))
    assert resp.status_code == 401


def test_refresh_token_is_not_accepted_as_access_token(
    client: TestClient, admin_a: Admin
) -> None:
    refresh = login(client)["refreshToken"]
    resp = client.get("/auth/me", headers=bearer(refresh))
    assert resp.status_code == 401


def test_deleted_admin_token_rejected_on_next_request(
    client: TestClient, admin_a: Admin
) -> None:
    """Validation looks the admin up on every call, so removal is immediate."""
    token = mint_token(admin_a)
    assert client.get("/auth/me", headers=bearer(token)).status_code == 200

    run(stores_module.admin_repo.delete(admin_a.id))

    resp = client.get("/auth/me", headers=bearer(token))
    assert resp.status_code == 401
