from __future__ import annotations

from dataclasses import replace
from datetime import UTC, datetime
from typing import Any, Protocol
from uuid import UUID

from event_portal.models.event import Event, EventFilter, EventPage

SORTABLE_FIELDS = ("name", "start_date", "end_date", "created_at")


class EventRepo(Protocol):
    async def add(self, event: Event) -> None: ...
    async def get(self, event_id: UUID) -> Event | None: ...
    async def list(self, flt: EventFilter) -> EventPage: ...
    async def list_all(self) -> list[Event]: ...
    async def update(self, event_id: UUID, changes: dict[str, Any]) -> Event | None: ...
    async def delete(self, event_id: UUID) -> bool: ...


def _matches(event: Event, flt: EventFilter) -> bool:
    if flt.status is not None and event.status != flt.status:
        return False
    if flt.search:
        needle = flt.search.lower()
        if needle not in event.name.lower() and needle not in event.location.lower():
            return False
    return True


class InMemoryEventRepo:
    def __init__(self) -> None:
        self._by_id: dict[UUID, Event] = {}

    async def add(self, event: Event) -> None:
        self._by_id[event.id] = event

    async def get(self, event_id: UUID) -> Event | None:
        return self._by_id.get(event_id)

    async def list(self, flt: EventFilter) -> EventPage:
        if flt.sort_by not in SORTABLE_FIELDS:
            raise ValueError(f"cannot sort by {flt.sort_by!r}")
        matched = [e for e in self._by_id.values() if _matches(e, flt)]
        matched.sort(key=lambda e: getattr(e, flt.sort_by), reverse=flt.descending)
        window = matched[flt.offset : flt.offset + flt.limit]
        return EventPage(items=window, total=len(matched), page=flt.page, limit=flt.limit)

    async def list_all(self) -> list[Event]:
        return sorted(self._by_id.values(), key=lambda e: e.created_at, reverse=True)

    async def update(self, event_id: UUID, changes: dict[str, Any]) -> Event | None:
        e = self._by_id.get(event_id)
        if e is None:
            return None
        updated = replace(e, **changes, updated_at=datetime.now(UTC))
        self._by_id[event_id] = updated
        return updated

    async def delete(self, event_id: UUID) -> bool:
        return self._by_id.pop(event_id, None) is not None

    def clear(self) -> None:
        self._by_id.clear()
