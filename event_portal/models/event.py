from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID, uuid4


class EventStatus(str, enum.Enum):
    ONGOING = "ONGOING"
    COMPLETED = "COMPLETED"


@dataclass(frozen=True, slots=True)
class Event:
    id: UUID
    name: str
    start_date: datetime
    end_date: datetime
    location: str
    created_by_id: UUID
    created_at: datetime
    updated_at: datetime
    poster_url: str | None = None
    status: EventStatus = EventStatus.ONGOING

    @staticmethod
    def new(
        *,
        name: str,
        start_date: datetime,
        end_date: datetime,
        location: str,
        created_by_id: UUID,
        poster_url: str | None = None,
    ) -> Event:
        now = datetime.now(UTC)
        return Event(
            id=uuid4(),
            name=name,
            start_date=start_date,
            end_date=end_date,
            location=location,
            created_by_id=created_by_id,
            created_at=now,
            updated_at=now,
            poster_url=poster_url,
        )


@dataclass(frozen=True, slots=True)
class EventFilter:
    """Listing parameters for the admin event table."""

    page: int = 1
    limit: int = 10
    sort_by: str = "created_at"  # name|start_date|end_date|created_at
    descending: bool = True
    status: EventStatus | None = None
    search: str | None = None

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


@dataclass(frozen=True, slots=True)
class EventPage:
    items: list[Event]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        # ceil(total / limit) without floats
        return -(-self.total // self.limit) if self.limit else 0
