"""SQL implementation of RefreshTokenRepo."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from event_portal.db.tables import RefreshTokenRow
from event_portal.models.refresh_token import RefreshTokenRecord
from event_portal.repos.pg_admin_repo import as_utc


class PgRefreshTokenRepo:
    """Satisfies the RefreshTokenRepo Protocol over an AsyncSession."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add(self, record: RefreshTokenRecord) -> None:
        row = RefreshTokenRow(
            id=record.id,
            token=record.token,
            admin_id=record.admin_id,
            expires_at=record.expires_at,
            created_at=record.created_at,
        )
        self._session.add(row)
        await self._session.flush()

    async def get_by_token(self, token: str) -> RefreshTokenRecord | None:
        stmt = select(RefreshTokenRow).where(RefreshTokenRow.token == token)
        row = (await self._session.execute(stmt)).scalar_one_or_none()
        if row is None:
            return None
        return _row_to_record(row)

    async def consume(self, token: str, now: datetime) -> RefreshTokenRecord | None:
        """Delete the token's row and return it, or None if absent or expired.

        Only the caller whose DELETE removed the row gets the record back;
        a concurrent consumer of the same token sees rowcount 0.  An expired
        row is deleted too and reported as absent.
        """
        record = await self.get_by_token(token)
        if record is None:
            return None

        result = await self._session.execute(
            delete(RefreshTokenRow).where(RefreshTokenRow.id == record.id)
        )
        if result.rowcount == 0:
            return None  # concurrent consume won the race

        if record.is_expired(now):
            return None
        return record

    async def delete_by_token(self, token: str) -> bool:
        result = await self._session.execute(
            delete(RefreshTokenRow).where(RefreshTokenRow.token == token)
        )
        return result.rowcount > 0

    async def purge_expired(self, now: datetime) -> int:
        result = await self._session.execute(
            delete(RefreshTokenRow).where(RefreshTokenRow.expires_at <= now)
        )
        return result.rowcount


def _row_to_record(row: RefreshTokenRow) -> RefreshTokenRecord:
    return RefreshTokenRecord(
        id=row.id,
        token=row.token,
        admin_id=row.admin_id,
        expires_at=as_utc(row.expires_at),
        created_at=as_utc(row.created_at),
    )
