"""Ownership gate for event mutations.

The checks run as an ordered pipeline and each stage is a plain function
that can be exercised on its own:

    1. require_found     the event exists             else NotFound   (404)
    2. require_owner     the caller created it        else Forbidden  (403)
    3. require_step_up   the caller re-enters their   else InvalidPassword (401)
                         password (deletion only)

Existence is revealed before ownership, but a non-owner never gets to
see or touch the event's data.  The step-up runs last so a wrong password
from a non-owner is reported as 403, not as a password failure.
"""

from __future__ import annotations

import logging
from uuid import UUID

from event_portal.db.stores import Stores
from event_portal.models.event import Event
from event_portal.models.identity import AdminIdentity
from event_portal.services import auth_service
from event_portal.services.errors import Forbidden, NotFound

logger = logging.getLogger(__name__)


def require_found(event: Event | None, event_id: UUID) -> Event:
    if event is None:
        logger.info("Event not found: event=%s", event_id)
        raise NotFound("Event not found")
    return event


def require_owner(event: Event, caller: AdminIdentity, *, action: str = "update") -> None:
    if not caller.owns(event.created_by_id):
        logger.warning(
            "Ownership denied: admin=%s event=%s owner=%s action=%s",
            caller.id,
            event.id,
            event.created_by_id,
            action,
        )
        raise Forbidden(f"You can only {action} your own events")


async def require_step_up(stores: Stores, caller: AdminIdentity, password: str) -> None:
    await auth_service.verify_admin_password(stores, caller.id, password)


async def guard_mutation(stores: Stores, caller: AdminIdentity, event_id: UUID) -> Event:
    event = require_found(await stores.events.get(event_id), event_id)
    require_owner(event, caller, action="update")
    return event


async def guard_deletion(
    stores: Stores,
    caller: AdminIdentity,
    event_id: UUID,
    password: str,
) -> Event:
    event = require_found(await stores.events.get(event_id), event_id)
    require_owner(event, caller, action="delete")
    await require_step_up(stores, caller, password)
    return event
