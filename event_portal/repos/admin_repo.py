from __future__ import annotations

from dataclasses import replace
from datetime import UTC, datetime
from typing import Protocol
from uuid import UUID

from event_portal.models.admin import Admin, normalize_email


class AdminRepo(Protocol):
    async def get_by_id(self, admin_id: UUID) -> Admin | None: ...
    async def get_by_email(self, email: str) -> Admin | None: ...
    async def add(self, admin: Admin) -> None: ...
    async def update_password_hash(self, admin_id: UUID, password_hash: str) -> None: ...
    async def delete(self, admin_id: UUID) -> bool: ...


class InMemoryAdminRepo:
    def __init__(self) -> None:
        self._by_email: dict[str, Admin] = {}
        self._by_id: dict[UUID, Admin] = {}

    async def get_by_id(self, admin_id: UUID) -> Admin | None:
        return self._by_id.get(admin_id)

    async def get_by_email(self, email: str) -> Admin | None:
        return self._by_email.get(normalize_email(email))

    async def add(self, admin: Admin) -> None:
        if admin.email in self._by_email:
            raise ValueError("email already exists")
        self._by_email[admin.email] = admin
        self._by_id[admin.id] = admin

    async def update_password_hash(self, admin_id: UUID, password_hash: str) -> None:
        a = self._by_id.get(admin_id)
        if a is None:
            raise KeyError("admin not found")

        updated = replace(a, password_hash=password_hash, updated_at=datetime.now(UTC))
        self._by_id[admin_id] = updated
        self._by_email[updated.email] = updated

    async def delete(self, admin_id: UUID) -> bool:
        a = self._by_id.pop(admin_id, None)
        if a is None:
            return False
        self._by_email.pop(a.email, None)
        return True

    def clear(self) -> None:
        self._by_email.clear()
        self._by_id.clear()
