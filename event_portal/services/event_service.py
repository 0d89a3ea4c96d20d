from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any
from uuid import UUID

from event_portal.db.stores import Stores
from event_portal.models.admin import Admin
from event_portal.models.event import Event, EventFilter, EventPage
from event_portal.models.identity import AdminIdentity
from event_portal.services import access
from event_portal.services.errors import NotFound

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = frozenset(
    {"name", "start_date", "end_date", "location", "poster_url", "status"}
)


@dataclass(frozen=True, slots=True)
class EventView:
    """An event plus its creator, for admin-facing payloads."""

    event: Event
    created_by: Admin | None


async def _with_creators(stores: Stores, events: list[Event]) -> list[EventView]:
    creators: dict[UUID, Admin | None] = {}
    for owner_id in {e.created_by_id for e in events}:
        creators[owner_id] = await stores.admins.get_by_id(owner_id)
    return [EventView(event=e, created_by=creators[e.created_by_id]) for e in events]


async def create_event(
    stores: Stores,
    caller: AdminIdentity,
    *,
    name: str,
    start_date: datetime,
    end_date: datetime,
    location: str,
    poster_url: str | None = None,
) -> EventView:
    event = Event.new(
        name=name,
        start_date=start_date,
        end_date=end_date,
        location=location,
        created_by_id=caller.id,
        poster_url=poster_url,
    )
    await stores.events.add(event)
    logger.info("Event created: event=%s admin=%s", event.id, caller.id)
    return (await _with_creators(stores, [event]))[0]


async def list_events(stores: Stores, flt: EventFilter) -> tuple[list[EventView], EventPage]:
    page = await stores.events.list(flt)
    return await _with_creators(stores, page.items), page


async def get_event(stores: Stores, event_id: UUID) -> EventView:
    event = access.require_found(await stores.events.get(event_id), event_id)
    return (await _with_creators(stores, [event]))[0]


async def update_event(
    stores: Stores,
    caller: AdminIdentity,
    event_id: UUID,
    changes: dict[str, Any],
) -> EventView:
    unknown = set(changes) - UPDATABLE_FIELDS
    if unknown:
        raise ValueError(f"fields not updatable: {sorted(unknown)}")

    await access.guard_mutation(stores, caller, event_id)

    updated = await stores.events.update(event_id, changes)
    if updated is None:
        # deleted between the guard and the write
        raise NotFound("Event not found")
    logger.info("Event updated: event=%s admin=%s fields=%s", event_id, caller.id, sorted(changes))
    return (await _with_creators(stores, [updated]))[0]


async def delete_event(
    stores: Stores,
    caller: AdminIdentity,
    event_id: UUID,
    password: str,
) -> None:
    await access.guard_deletion(stores, caller, event_id, password)
    if not await stores.events.delete(event_id):
        raise NotFound("Event not found")
    logger.info("Event deleted: event=%s admin=%s", event_id, caller.id)


async def list_public_events(stores: Stores) -> list[Event]:
    return await stores.events.list_all()


async def get_public_event(stores: Stores, event_id: UUID) -> Event:
    return access.require_found(await stores.events.get(event_id), event_id)
