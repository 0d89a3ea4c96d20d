from __future__ import annotations

import asyncio
import os
import sys
from collections.abc import Coroutine
from pathlib import Path
from typing import Any, TypeVar
from uuid import UUID

# Tests run against the in-memory stores and limiter.
os.environ.setdefault("APP_ENV", "test")
os.environ.pop("DATABASE_URL", None)
os.environ.pop("REDIS_URL", None)

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

# Ensure repo root is on sys.path so `import event_portal` works under pytest.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from event_portal.api import ratelimit  # noqa: E402
from event_portal.db import stores as stores_module  # noqa: E402
from event_portal.db.stores import Stores  # noqa: E402
from event_portal.main import app  # noqa: E402
from event_portal.models.admin import Admin  # noqa: E402
from event_portal.models.event import Event  # noqa: E402
from event_portal.services import auth_service, token_service  # noqa: E402

T = TypeVar("T")

ADMIN_A_EMAIL = "a@x.com"
ADMIN_B_EMAIL = "b@x.com"
PASSWORD = "correct-password"


def run(coro: Coroutine[Any, Any, T]) -> T:
    """Drive an async service or repo call from a sync test."""
    return asyncio.run(coro)


@pytest.fixture(autouse=True)
def reset_stores() -> None:
    """Clear the in-memory admin, ledger and event repos between tests."""
    stores_module.reset_memory_stores()


@pytest.fixture(autouse=True)
def reset_rate_limiter() -> None:
    """Clear rate limit buckets between tests so limits don't bleed."""
    limiter = ratelimit.rate_limiter
    if hasattr(limiter, "clear"):
        limiter.clear()  # type: ignore[union-attr]


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


@pytest.fixture
def stores() -> Stores:
    return stores_module.memory_stores


def seed_admin(email: str = ADMIN_A_EMAIL, password: str = PASSWORD) -> Admin:
    """Create an admin directly in the in-memory repo."""
    admin = Admin.new(email=email, password_hash=auth_service.hash_password(password))
    run(stores_module.admin_repo.add(admin))
    return admin


def seed_event(owner_id: UUID, name: str = "Launch party", **overrides: Any) -> Event:
    from datetime import UTC, datetime

    fields: dict[str, Any] = {
        "name": name,
        "start_date": datetime(2030, 5, 1, 18, tzinfo=UTC),
        "end_date": datetime(2030, 5, 1, 23, tzinfo=UTC),
        "location": "Main hall",
        "created_by_id": owner_id,
    }
    fields.update(overrides)
    event = Event.new(**fields)
    run(stores_module.event_repo.add(event))
    return event


def mint_token(admin: Admin) -> str:
    """A valid access token for ``admin``, without going through login."""
    return token_service.create_access_token(sub=str(admin.id), email=admin.email)


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_a() -> Admin:
    return seed_admin(ADMIN_A_EMAIL)


@pytest.fixture
def admin_b() -> Admin:
    return seed_admin(ADMIN_B_EMAIL)


def login(client: TestClient, email: str = ADMIN_A_EMAIL, password: str = PASSWORD) -> dict:
    resp = client.post("/auth/login", json={"email": email, "password": password})
    assert resp.status_code == 200, resp.text
    return resp.json()
