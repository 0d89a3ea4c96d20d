from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from uuid import UUID, uuid4


@dataclass(frozen=True, slots=True)
class RefreshTokenRecord:
    """Ledger row for one currently-valid refresh token.

    A token string is single-use: once its record is deleted it must never
    validate again.
    """

    id: UUID
    token: str
    admin_id: UUID
    expires_at: datetime
    created_at: datetime

    @staticmethod
    def new(
        *,
        token: str,
        admin_id: UUID,
        ttl: timedelta,
        now: datetime | None = None,
    ) -> RefreshTokenRecord:
        now = now or datetime.now(UTC)
        return RefreshTokenRecord(
            id=uuid4(),
            token=token,
            admin_id=admin_id,
            expires_at=now + ttl,
            created_at=now,
        )

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at <= now
