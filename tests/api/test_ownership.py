"""Ownership gate tests for PATCH and DELETE /events/{id}.

The checks run in a fixed order: existence (404), then ownership (403),
then for deletion only the caller's password (401).  A non-owner never
reaches the password check, so a wrong password from them is still 403.
"""

from __future__ import annotations

from uuid import uuid4

from fastapi.testclient import TestClient

from event_portal.db import stores as stores_module
from event_portal.models.admin import Admin
from tests.conftest import PASSWORD, bearer, mint_token, run, seed_event


def _delete(client: TestClient, event_id, token: str, password: str):
    return client.request(
        "DELETE",
        f"/events/{event_id}",
        headers=bearer(token),
        json={"password": password},
    )


# ---------------------------------------------------------------------------
# Update
# ---------------------------------------------------------------------------


def test_owner_can_update(client: TestClient, admin_a: Admin) -> None:
    event = seed_event(admin_a.id)
    resp = client.patch(
        f"/events/{event.id}",
        headers=bearer(mint_token(admin_a)),
        json={"name": "Renamed", "status": "COMPLETED"},
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["name"] == "Renamed"
    assert body["status"] == "COMPLETED"
    assert body["location"] == event.location


def test_null_poster_url_clears_poster(client: TestClient, admin_a: Admin) -> None:
    event = seed_event(admin_a.id, poster_url="http://localhost:8000/uploads/file-1-2.png")
    resp = client.patch(
        f"/events/{event.id}",
        headers=bearer(mint_token(admin_a)),
        json={"posterUrl": None},
    )
    assert resp.status_code == 200
    assert resp.json()["posterUrl"] is None

    stored = run(stores_module.event_repo.get(event.id))
    assert stored is not None
    assert stored.poster_url is None


def test_null_for_other_fields_is_ignored(client: TestClient, admin_a: Admin) -> None:
    event = seed_event(admin_a.id)
    resp = client.patch(
        f"/events/{event.id}",
        headers=bearer(mint_token(admin_a)),
        json={"name": None, "location": None, "status": "COMPLETED"},
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["name"] == event.name
    assert body["location"] == event.location
    assert body["status"] == "COMPLETED"


def test_non_owner_update_is_forbidden_and_event_untouched(
    client: TestClient, admin_a: Admin, admin_b: Admin
) -> None:
    event = seed_event(admin_a.id)
    resp = client.patch(
        f"/events/{event.id}",
        headers=bearer(mint_token(admin_b)),
        json={"name": "Hijacked"},
    )
    assert resp.status_code == 403
    assert resp.json() == {"detail": "You can only update your own events"}

    stored = run(stores_module.event_repo.get(event.id))
    assert stored is not None
    assert stored.name == event.name


def test_update_missing_event_is_404(client: TestClient, admin_a: Admin) -> None:
    resp = client.patch(
        f"/events/{uuid4()}",
        headers=bearer(mint_token(admin_a)),
        json={"name": "Ghost"},
    )
    assert resp.status_code == 404
    assert resp.json() == {"detail": "Event not found"}


def test_update_without_token_is_401(client: TestClient, admin_a: Admin) -> None:
    event = seed_event(admin_a.id)
    resp = client.patch(f"/events/{event.id}", json={"name": "Anon"})
    assert resp.status_code == 401


# ---------------------------------------------------------------------------
# Delete with step-up
# ---------------------------------------------------------------------------


def test_owner_delete_with_correct_password(client: TestClient, admin_a: Admin) -> None:
    event = seed_event(admin_a.id)
    resp = _delete(client, event.id, mint_token(admin_a), PASSWORD)
    assert resp.status_code == 200
    assert resp.json() == {"message": "Event deleted successfully"}
    assert run(stores_module.event_repo.get(event.id)) is None


def test_owner_delete_with_wrong_password_is_401_and_event_survives(
    client: TestClient, admin_a: Admin
) -> None:
    event = seed_event(admin_a.id)
    resp = _delete(client, event.id, mint_token(admin_a), "wrong-password")
    assert resp.status_code == 401
    assert resp.json() == {"detail": "Invalid password"}
    assert run(stores_module.event_repo.get(event.id)) is not None


def test_step_up_failure_has_no_bearer_challenge(client: TestClient, admin_a: Admin) -> None:
    """The session is fine; only the re-entered password was wrong."""
    event = seed_event(admin_a.id)
    resp = _delete(client, event.id, mint_token(admin_a), "wrong-password")
    assert "www-authenticate" not in resp.headers


def test_non_owner_delete_with_own_correct_password_is_403(
    client: TestClient, admin_a: Admin, admin_b: Admin
) -> None:
    event = seed_event(admin_a.id)
    resp = _delete(client, event.id, mint_token(admin_b), PASSWORD)
    assert resp.status_code == 403
    assert resp.json() == {"detail": "You can only delete your own events"}
    assert run(stores_module.event_repo.get(event.id)) is not None


def test_non_owner_with_wrong_password_still_gets_403(
    client: TestClient, admin_a: Admin, admin_b: Admin
) -> None:
    event = seed_event(admin_a.id)
    resp = _delete(client, event.id, mint_token(admin_b), "wrong-password")
    assert resp.status_code == 403


def test_delete_missing_event_is_404_before_password_check(
    client: TestClient, admin_a: Admin
) -> None:
    resp = _delete(client, uuid4(), mint_token(admin_a), "wrong-password")
    assert resp.status_code == 404


def test_delete_requires_password_body(client: TestClient, admin_a: Admin) -> None:
    event = seed_event(admin_a.id)
    resp = client.delete(f"/events/{event.id}", headers=bearer(mint_token(admin_a)))
    assert resp.status_code == 422


def test_deleted_event_cannot_be_deleted_again(client: TestClient, admin_a: Admin) -> None:
    event = seed_event(admin_a.id)
    token = mint_token(admin_a)
    assert _delete(client, event.id, token, PASSWORD).status_code == 200
    assert _delete(client, event.id, token, PASSWORD).status_code == 404
