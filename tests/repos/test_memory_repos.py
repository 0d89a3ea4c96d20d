from __future__ import annotations

from datetime import UTC, datetime, timedelta
from uuid import uuid4

import pytest

from event_portal.models.admin import Admin
from event_portal.models.event import Event, EventFilter, EventStatus
from event_portal.models.refresh_token import RefreshTokenRecord
from event_portal.repos.admin_repo import InMemoryAdminRepo
from event_portal.repos.event_repo import InMemoryEventRepo
from event_portal.repos.refresh_token_repo import InMemoryRefreshTokenRepo
from tests.conftest import run


def test_admin_repo_rejects_duplicate_email() -> None:
    repo = InMemoryAdminRepo()
    run(repo.add(Admin.new(email="a@x.com", password_hash="h")))
    with pytest.raises(ValueError):
        run(repo.add(Admin.new(email="A@X.com", password_hash="h")))


def test_admin_repo_delete() -> None:
    repo = InMemoryAdminRepo()
    admin = Admin.new(email="a@x.com", password_hash="h")
    run(repo.add(admin))

    assert run(repo.delete(admin.id)) is True
    assert run(repo.delete(admin.id)) is False
    assert run(repo.get_by_email("a@x.com")) is None


def test_ledger_consume_then_gone() -> None:
    repo = InMemoryRefreshTokenRepo()
    now = datetime.now(UTC)
    run(repo.add(RefreshTokenRecord.new(token="t", admin_id=uuid4(), ttl=timedelta(days=1), now=now)))

    assert run(repo.consume("t", now)) is not None
    assert run(repo.consume("t", now)) is None


def test_ledger_consume_at_exact_expiry_is_expired() -> None:
    repo = InMemoryRefreshTokenRepo()
    now = datetime.now(UTC)
    rec = RefreshTokenRecord.new(token="t", admin_id=uuid4(), ttl=timedelta(hours=1), now=now)
    run(repo.add(rec))

    assert run(repo.consume("t", rec.expires_at)) is None
    assert run(repo.get_by_token("t")) is None


def test_ledger_rejects_duplicate_token() -> None:
    repo = InMemoryRefreshTokenRepo()
    rec = RefreshTokenRecord.new(token="t", admin_id=uuid4(), ttl=timedelta(days=1))
    run(repo.add(rec))
    with pytest.raises(ValueError):
        run(repo.add(rec))


def _event(name: str, owner=None, **kw) -> Event:
    return Event.new(
        name=name,
        start_date=kw.get("start_date", datetime(2030, 1, 1, tzinfo=UTC)),
        end_date=datetime(2030, 1, 2, tzinfo=UTC),
        location=kw.get("location", "Hall"),
        created_by_id=owner or uuid4(),
    )


def test_event_repo_sort_by_start_date() -> None:
    repo = InMemoryEventRepo()
    for day in (3, 1, 2):
        run(repo.add(_event(f"day {day}", start_date=datetime(2030, 1, day, tzinfo=UTC))))

    page = run(repo.list(EventFilter(sort_by="start_date", descending=False)))
    assert [e.name for e in page.items] == ["day 1", "day 2", "day 3"]


def test_event_repo_rejects_unknown_sort() -> None:
    with pytest.raises(ValueError):
        run(InMemoryEventRepo().list(EventFilter(sort_by="location")))


def test_event_repo_update_bumps_updated_at() -> None:
    repo = InMemoryEventRepo()
    e = _event("x")
    run(repo.add(e))

    updated = run(repo.update(e.id, {"status": EventStatus.COMPLETED}))
    assert updated is not None
    assert updated.status is EventStatus.COMPLETED
    assert updated.updated_at >= e.updated_at
    assert run(repo.update(uuid4(), {"name": "y"})) is None
