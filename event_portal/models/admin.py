from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID, uuid4


def normalize_email(email: str) -> str:
    return email.strip().lower()


@dataclass(frozen=True, slots=True)
class Admin:
    id: UUID
    email: str
    password_hash: str
    created_at: datetime
    updated_at: datetime

    @staticmethod
    def new(*, email: str, password_hash: str) -> Admin:
        now = datetime.now(UTC)
        return Admin(
            id=uuid4(),
            email=normalize_email(email),
            password_hash=password_hash,
            created_at=now,
            updated_at=now,
        )
