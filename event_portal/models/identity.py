from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True, slots=True)
class AdminIdentity:
    """Authenticated caller produced by the session validator.

    Carried through the request via FastAPI's dependency system; ownership
    checks compare a resource's created_by_id against ``id``.
    """

    id: UUID
    email: str

    def owns(self, owner_id: UUID) -> bool:
        return self.id == owner_id
