"""Event endpoints.

Admin routes (bearer token required):
  POST   /events           create; the caller becomes the owner
  GET    /events           paginated, filterable listing
  GET    /events/{id}
  PATCH  /events/{id}      owner only
  DELETE /events/{id}      owner only, body {password} re-checked first

Public routes (no token):
  GET    /events/public
  GET    /events/public/{id}

/events/public is declared before /events/{id} so the literal path wins.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Literal
from uuid import UUID

from fastapi import APIRouter, Query, status
from pydantic import BaseModel, Field, field_validator

from event_portal.api.dependencies import CurrentAdmin, StoresDep
from event_portal.models.event import Event, EventFilter, EventStatus
from event_portal.services import event_service
from event_portal.services.event_service import EventView

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/events", tags=["events"])

_URL_PATTERN = r"^https?://\S+$"

# wire name -> model attribute
_SORT_FIELDS = {
    "name": "name",
    "startDate": "start_date",
    "endDate": "end_date",
    "createdAt": "created_at",
}


def _as_utc(v: datetime) -> datetime:
    return v.replace(tzinfo=UTC) if v.tzinfo is None else v.astimezone(UTC)


# --- Request / Response schemas -------------------------------------------


class EventCreateIn(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    startDate: datetime
    endDate: datetime
    location: str = Field(min_length=1, max_length=300)
    posterUrl: str | None = Field(default=None, pattern=_URL_PATTERN)

    @field_validator("startDate", "endDate")
    @classmethod
    def _utc(cls, v: datetime) -> datetime:
        return _as_utc(v)


class EventUpdateIn(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=200)
    startDate: datetime | None = None
    endDate: datetime | None = None
    location: str | None = Field(default=None, min_length=1, max_length=300)
    posterUrl: str | None = Field(default=None, pattern=_URL_PATTERN)
    status: EventStatus | None = None

    @field_validator("startDate", "endDate")
    @classmethod
    def _utc(cls, v: datetime | None) -> datetime | None:
        return _as_utc(v) if v is not None else None

    def changes(self) -> dict:
        """Fields the caller sent.  Only posterUrl may be cleared with null."""
        wire = {
            k: v
            for k, v in self.model_dump(exclude_unset=True).items()
            if v is not None or k == "posterUrl"
        }
        renames = {
            "startDate": "start_date",
            "endDate": "end_date",
            "posterUrl": "poster_url",
        }
        return {renames.get(k, k): v for k, v in wire.items()}


class DeleteEventIn(BaseModel):
    password: str


class CreatorOut(BaseModel):
    id: str
    email: str


class PublicEventOut(BaseModel):
    id: str
    name: str
    startDate: datetime
    endDate: datetime
    location: str
    posterUrl: str | None
    status: EventStatus
    createdById: str
    createdAt: datetime
    updatedAt: datetime

    @classmethod
    def from_event(cls, e: Event) -> PublicEventOut:
        return cls(**_event_fields(e))


class EventOut(PublicEventOut):
    createdBy: CreatorOut | None

    @classmethod
    def from_view(cls, view: EventView) -> EventOut:
        creator = view.created_by
        return cls(
            **_event_fields(view.event),
            createdBy=(
                CreatorOut(id=str(creator.id), email=creator.email) if creator else None
            ),
        )


class PageMeta(BaseModel):
    total: int
    page: int
    limit: int
    totalPages: int


class EventListOut(BaseModel):
    data: list[EventOut]
    meta: PageMeta


class MessageOut(BaseModel):
    message: str


def _event_fields(e: Event) -> dict:
    return {
        "id": str(e.id),
        "name": e.name,
        "startDate": e.start_date,
        "endDate": e.end_date,
        "location": e.location,
        "posterUrl": e.poster_url,
        "status": e.status,
        "createdById": str(e.created_by_id),
        "createdAt": e.created_at,
        "updatedAt": e.updated_at,
    }


# --- Admin routes ---------------------------------------------------------


@router.post("", response_model=EventOut, status_code=status.HTTP_201_CREATED)
async def create_event(payload: EventCreateIn, admin: CurrentAdmin, stores: StoresDep) -> EventOut:
    view = await event_service.create_event(
        stores,
        admin,
        name=payload.name,
        start_date=payload.startDate,
        end_date=payload.endDate,
        location=payload.location,
        poster_url=payload.posterUrl,
    )
    return EventOut.from_view(view)


@router.get("", response_model=EventListOut)
async def list_events(
    admin: CurrentAdmin,
    stores: StoresDep,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    sortBy: Literal["name", "startDate", "endDate", "createdAt"] = "createdAt",
    sortOrder: Literal["asc", "desc"] = "desc",
    event_status: EventStatus | None = Query(None, alias="status"),
    search: str | None = Query(None, max_length=200),
) -> EventListOut:
    flt = EventFilter(
        page=page,
        limit=limit,
        sort_by=_SORT_FIELDS[sortBy],
        descending=sortOrder == "desc",
        status=event_status,
        search=search.strip() if search and search.strip() else None,
    )
    views, result = await event_service.list_events(stores, flt)
    return EventListOut(
        data=[EventOut.from_view(v) for v in views],
        meta=PageMeta(
            total=result.total,
            page=result.page,
            limit=result.limit,
            totalPages=result.total_pages,
        ),
    )


# --- Public routes (must precede /{event_id}) -----------------------------


@router.get("/public", response_model=list[PublicEventOut])
async def list_public_events(stores: StoresDep) -> list[PublicEventOut]:
    events = await event_service.list_public_events(stores)
    return [PublicEventOut.from_event(e) for e in events]


@router.get("/public/{event_id}", response_model=PublicEventOut)
async def get_public_event(event_id: UUID, stores: StoresDep) -> PublicEventOut:
    return PublicEventOut.from_event(await event_service.get_public_event(stores, event_id))


# --- Single-event admin routes --------------------------------------------


@router.get("/{event_id}", response_model=EventOut)
async def get_event(event_id: UUID, admin: CurrentAdmin, stores: StoresDep) -> EventOut:
    return EventOut.from_view(await event_service.get_event(stores, event_id))


@router.patch("/{event_id}", response_model=EventOut)
async def update_event(
    event_id: UUID,
    payload: EventUpdateIn,
    admin: CurrentAdmin,
    stores: StoresDep,
) -> EventOut:
    view = await event_service.update_event(stores, admin, event_id, payload.changes())
    return EventOut.from_view(view)


@router.delete("/{event_id}", response_model=MessageOut)
async def delete_event(
    event_id: UUID,
    payload: DeleteEventIn,
    admin: CurrentAdmin,
    stores: StoresDep,
) -> MessageOut:
    await event_service.delete_event(stores, admin, event_id, payload.password)
    return MessageOut(message="Event deleted successfully")
