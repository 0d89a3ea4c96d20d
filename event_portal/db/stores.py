"""The store bundle handed to every service call.

Services never reach for module-level repositories; they receive a
``Stores`` built per request by ``get_stores``.  With DATABASE_URL set the
bundle wraps one AsyncSession, so everything a request writes commits or
rolls back together.  Without it, the process-wide in-memory repos below
are used (dev and tests).
"""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from event_portal.db import engine as db_engine
from event_portal.repos.admin_repo import AdminRepo, InMemoryAdminRepo
from event_portal.repos.event_repo import EventRepo, InMemoryEventRepo
from event_portal.repos.pg_admin_repo import PgAdminRepo
from event_portal.repos.pg_event_repo import PgEventRepo
from event_portal.repos.pg_refresh_token_repo import PgRefreshTokenRepo
from event_portal.repos.refresh_token_repo import (
    InMemoryRefreshTokenRepo,
    RefreshTokenRepo,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Stores:
    admins: AdminRepo
    refresh_tokens: RefreshTokenRepo
    events: EventRepo


admin_repo = InMemoryAdminRepo()
refresh_token_repo = InMemoryRefreshTokenRepo()
event_repo = InMemoryEventRepo()

memory_stores = Stores(
    admins=admin_repo,
    refresh_tokens=refresh_token_repo,
    events=event_repo,
)


def sql_stores(session: AsyncSession) -> Stores:
    return Stores(
        admins=PgAdminRepo(session),
        refresh_tokens=PgRefreshTokenRepo(session),
        events=PgEventRepo(session),
    )


def reset_memory_stores() -> None:
    admin_repo.clear()
    refresh_token_repo.clear()
    event_repo.clear()


async def get_stores() -> AsyncGenerator[Stores, None]:
    """FastAPI dependency yielding the request's Stores.

    Commits on success, rolls back on exception.
    """
    factory = db_engine.async_session_factory
    if factory is None:
        yield memory_stores
        return

    async with factory() as session:
        try:
            yield sql_stores(session)
            await session.commit()
        except Exception:
            await session.rollback()
            raise
