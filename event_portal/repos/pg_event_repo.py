"""SQL implementation of EventRepo."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any
from uuid import UUID

from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from event_portal.db.tables import EventRow
from event_portal.models.event import Event, EventFilter, EventPage
from event_portal.repos.event_repo import SORTABLE_FIELDS
from event_portal.repos.pg_admin_repo import as_utc


class PgEventRepo:
    """Satisfies the EventRepo Protocol over an AsyncSession."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add(self, event: Event) -> None:
        row = EventRow(
            id=event.id,
            name=event.name,
            start_date=event.start_date,
            end_date=event.end_date,
            location=event.location,
            poster_url=event.poster_url,
            status=event.status,
            created_by_id=event.created_by_id,
            created_at=event.created_at,
            updated_at=event.updated_at,
        )
        self._session.add(row)
        await self._session.flush()

    async def get(self, event_id: UUID) -> Event | None:
        row = await self._session.get(EventRow, event_id)
        if row is None:
            return None
        return _row_to_event(row)

    async def list(self, flt: EventFilter) -> EventPage:
        if flt.sort_by not in SORTABLE_FIELDS:
            raise ValueError(f"cannot sort by {flt.sort_by!r}")

        conditions = []
        if flt.status is not None:
            conditions.append(EventRow.status == flt.status)
        if flt.search:
            conditions.append(
                or_(
                    EventRow.name.icontains(flt.search, autoescape=True),
                    EventRow.location.icontains(flt.search, autoescape=True),
                )
            )

        count_stmt = select(func.count()).select_from(EventRow).where(*conditions)
        total = (await self._session.execute(count_stmt)).scalar_one()

        column = getattr(EventRow, flt.sort_by)
        stmt = (
            select(EventRow)
            .where(*conditions)
            .order_by(column.desc() if flt.descending else column.asc())
            .offset(flt.offset)
            .limit(flt.limit)
        )
        rows = (await self._session.execute(stmt)).scalars().all()
        return EventPage(
            items=[_row_to_event(r) for r in rows],
            total=total,
            page=flt.page,
            limit=flt.limit,
        )

    async def list_all(self) -> list[Event]:
        stmt = select(EventRow).order_by(EventRow.created_at.desc())
        rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_event(r) for r in rows]

    async def update(self, event_id: UUID, changes: dict[str, Any]) -> Event | None:
        stmt = (
            update(EventRow)
            .where(EventRow.id == event_id)
            .values(**changes, updated_at=datetime.now(UTC))
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        if result.rowcount == 0:
            return None
        row = await self._session.get(EventRow, event_id, populate_existing=True)
        return _row_to_event(row) if row is not None else None

    async def delete(self, event_id: UUID) -> bool:
        result = await self._session.execute(delete(EventRow).where(EventRow.id == event_id))
        return result.rowcount > 0


def _row_to_event(row: EventRow) -> Event:
    return Event(
        id=row.id,
        name=row.name,
        start_date=as_utc(row.start_date),
        end_date=as_utc(row.end_date),
        location=row.location,
        created_by_id=row.created_by_id,
        created_at=as_utc(row.created_at),
        updated_at=as_utc(row.updated_at),
        poster_url=row.poster_url,
        status=row.status,
    )
