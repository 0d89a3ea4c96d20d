"""SQL implementation of AdminRepo."""

from __future__ import annotations

from datetime import UTC, datetime
from uuid import UUID

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from event_portal.db.tables import AdminRow
from event_portal.models.admin import Admin, normalize_email


def as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone=True columns
    return value if value.tzinfo is not None else value.replace(tzinfo=UTC)


class PgAdminRepo:
    """Satisfies the AdminRepo Protocol over an AsyncSession."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, admin_id: UUID) -> Admin | None:
        stmt = select(AdminRow).where(AdminRow.id == admin_id)
        row = (await self._session.execute(stmt)).scalar_one_or_none()
        if row is None:
            return None
        return _row_to_admin(row)

    async def get_by_email(self, email: str) -> Admin | None:
        stmt = select(AdminRow).where(AdminRow.email == normalize_email(email))
        row = (await self._session.execute(stmt)).scalar_one_or_none()
        if row is None:
            return None
        return _row_to_admin(row)

    async def add(self, admin: Admin) -> None:
        row = AdminRow(
            id=admin.id,
            email=admin.email,
            password_hash=admin.password_hash,
            created_at=admin.created_at,
            updated_at=admin.updated_at,
        )
        self._session.add(row)
        await self._session.flush()

    async def update_password_hash(self, admin_id: UUID, password_hash: str) -> None:
        stmt = (
            update(AdminRow)
            .where(AdminRow.id == admin_id)
            .values(password_hash=password_hash, updated_at=datetime.now(UTC))
        )
        await self._session.execute(stmt)

    async def delete(self, admin_id: UUID) -> bool:
        result = await self._session.execute(delete(AdminRow).where(AdminRow.id == admin_id))
        return result.rowcount > 0


def _row_to_admin(row: AdminRow) -> Admin:
    return Admin(
        id=row.id,
        email=row.email,
        password_hash=row.password_hash,
        created_at=as_utc(row.created_at),
        updated_at=as_utc(row.updated_at),
    )
