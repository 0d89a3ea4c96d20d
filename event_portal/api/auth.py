"""Credential and session endpoints (/auth/*).

  POST /auth/register   create an admin account             201 {id, email}
  POST /auth/login      email + password -> token pair      200 | 401
  POST /auth/refresh    rotate a refresh token              200 | 401
  POST /auth/logout     forget a refresh token              200 always
  GET  /auth/me         who the access token belongs to     200 | 401

Refresh tokens travel only in request bodies, never in headers, so the
browser never attaches one to an unrelated request.
"""

from __future__ import annotations

import logging
import re

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field, field_validator

from event_portal.api.dependencies import CurrentAdmin, StoresDep
from event_portal.api.ratelimit import require_rate_limit
from event_portal.services import auth_service, session_service
from event_portal.services.rate_limiter import CREDENTIALS_LIMIT

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_credentials_throttle = [Depends(require_rate_limit(CREDENTIALS_LIMIT))]


# --- Request / Response schemas -------------------------------------------


class RegisterIn(BaseModel):
    email: str = Field(max_length=320)
    password: str = Field(min_length=8, max_length=128)

    @field_validator("email")
    @classmethod
    def _email_shape(cls, v: str) -> str:
        v = v.strip().lower()
        if not _EMAIL_RE.match(v):
            raise ValueError("Invalid email address")
        return v


class LoginIn(BaseModel):
    email: str
    password: str


class RefreshIn(BaseModel):
    refreshToken: str


class AdminOut(BaseModel):
    id: str
    email: str


class LoginOut(BaseModel):
    accessToken: str
    refreshToken: str
    admin: AdminOut


class TokenPairOut(BaseModel):
    accessToken: str
    refreshToken: str


class MessageOut(BaseModel):
    message: str


# --- Routes ---------------------------------------------------------------


@router.post(
    "/register",
    response_model=AdminOut,
    status_code=status.HTTP_201_CREATED,
    dependencies=_credentials_throttle,
)
async def register(payload: RegisterIn, stores: StoresDep) -> AdminOut:
    admin = await auth_service.register_admin(stores, payload.email, payload.password)
    return AdminOut(id=str(admin.id), email=admin.email)


@router.post("/login", response_model=LoginOut, dependencies=_credentials_throttle)
async def login(payload: LoginIn, stores: StoresDep) -> LoginOut:
    result = await auth_service.login(stores, payload.email, payload.password)
    return LoginOut(
        accessToken=result.tokens.access_token,
        refreshToken=result.tokens.refresh_token,
        admin=AdminOut(id=str(result.admin.id), email=result.admin.email),
    )


@router.post("/refresh", response_model=TokenPairOut)
async def refresh(payload: RefreshIn, stores: StoresDep) -> TokenPairOut:
    pair = await session_service.refresh_session(stores, payload.refreshToken)
    return TokenPairOut(accessToken=pair.access_token, refreshToken=pair.refresh_token)


@router.post("/logout", response_model=MessageOut)
async def logout(payload: RefreshIn, stores: StoresDep) -> MessageOut:
    await session_service.logout(stores, payload.refreshToken)
    return MessageOut(message="Logged out successfully")


@router.get("/me", response_model=AdminOut)
async def me(admin: CurrentAdmin) -> AdminOut:
    return AdminOut(id=str(admin.id), email=admin.email)
