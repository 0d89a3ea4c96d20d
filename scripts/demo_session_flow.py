"""Demo: walk the admin session lifecycle using FastAPI TestClient.

register -> login -> create event -> refresh (rotation) -> replay the
old refresh token -> delete with the wrong and then the right password
-> logout -> refresh after logout.

Run with:
    python scripts/demo_session_flow.py
"""

from __future__ import annotations

from fastapi.testclient import TestClient

from event_portal.main import app

EMAIL = "demo@example.com"
PASSWORD = "demo-password"


def main() -> None:
    client = TestClient(app)

    # ── Step 1: register + login ───────────────────────────────────
    r = client.post("/auth/register", json={"email": EMAIL, "password": PASSWORD})
    print(f"1. POST /auth/register      → {r.status_code}")

    r = client.post("/auth/login", json={"email": EMAIL, "password": PASSWORD})
    print(f"2. POST /auth/login         → {r.status_code}")
    tokens = r.json()
    auth = {"Authorization": f"Bearer {tokens['accessToken']}"}

    # ── Step 2: create an event ────────────────────────────────────
    r = client.post(
        "/events",
        headers=auth,
        json={
            "name": "Demo night",
            "startDate": "2030-01-01T18:00:00Z",
            "endDate": "2030-01-01T22:00:00Z",
            "location": "Main hall",
        },
    )
    event_id = r.json()["id"]
    print(f"3. POST /events             → {r.status_code}  id={event_id}")

    # ── Step 3: rotate, then replay the old refresh token ──────────
    old_refresh = tokens["refreshToken"]
    r = client.post("/auth/refresh", json={"refreshToken": old_refresh})
    print(f"4. POST /auth/refresh       → {r.status_code}  (rotated)")
    rotated = r.json()

    r = client.post("/auth/refresh", json={"refreshToken": old_refresh})
    print(f"5. POST /auth/refresh (old) → {r.status_code}  (replay refused)")

    # ── Step 4: step-up delete ─────────────────────────────────────
    auth = {"Authorization": f"Bearer {rotated['accessToken']}"}
    r = client.request("DELETE", f"/events/{event_id}", headers=auth, json={"password": "nope"})
    print(f"6. DELETE /events (bad pw)  → {r.status_code}")
    r = client.request("DELETE", f"/events/{event_id}", headers=auth, json={"password": PASSWORD})
    print(f"7. DELETE /events (good pw) → {r.status_code}")

    # ── Step 5: logout, then try to refresh ────────────────────────
    r = client.post("/auth/logout", json={"refreshToken": rotated["refreshToken"]})
    print(f"8. POST /auth/logout        → {r.status_code}")
    r = client.post("/auth/refresh", json={"refreshToken": rotated["refreshToken"]})
    print(f"9. POST /auth/refresh       → {r.status_code}  (logged out)")


if __name__ == "__main__":
    main()
