"""JWT access and refresh token creation and validation (HS256).

Access and refresh tokens are signed with two different secrets and carry
different audiences, so neither class of token can be forged from the
other's secret or replayed in the other's place.

Only refresh tokens are recorded server-side (see the refresh token
ledger).  issue_token_pair() is the one place that mints a pair, so every
refresh token in circulation has a ledger row.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from uuid import UUID

import jwt

from event_portal.core.config import SETTINGS
from event_portal.db.stores import Stores
from event_portal.models.refresh_token import RefreshTokenRecord

ALGORITHM = "HS256"
ISSUER = "event-portal"
AUDIENCE = "event-portal"
REFRESH_AUDIENCE = "event-portal-refresh"

_REQUIRED_CLAIMS = ["sub", "email", "exp", "iat", "jti"]


def access_token_ttl() -> timedelta:
    return timedelta(minutes=SETTINGS.access_token_ttl_min)


def refresh_token_ttl() -> timedelta:
    return timedelta(days=SETTINGS.refresh_token_ttl_days)


@dataclass(frozen=True, slots=True)
class TokenPair:
    access_token: str
    refresh_token: str


def _claims(sub: str, email: str, audience: str, now: datetime, ttl: timedelta) -> dict:
    return {
        "sub": sub,
        "email": email,
        "iss": ISSUER,
        "aud": audience,
        "exp": now + ttl,
        "iat": now,
        "jti": str(uuid.uuid4()),
    }


def create_access_token(*, sub: str, email: str, now: datetime | None = None) -> str:
    """Build and sign a short-lived access token."""
    now = now or datetime.now(UTC)
    payload = _claims(sub, email, AUDIENCE, now, access_token_ttl())
    return jwt.encode(payload, SETTINGS.jwt_secret, algorithm=ALGORITHM)


def decode_access_token(token: str) -> dict:
    """Verify signature and claims, return the payload.

    Pins the algorithm to HS256 to prevent alg:none and alg-switching
    attacks.  Validates exp, iss and aud via PyJWT options.

    Raises jwt.ExpiredSignatureError, jwt.InvalidTokenError on failure.
    """
    return jwt.decode(
        token,
        SETTINGS.jwt_secret,
        algorithms=[ALGORITHM],
        issuer=ISSUER,
        audience=AUDIENCE,
        options={"require": _REQUIRED_CLAIMS},
    )


def create_refresh_token(*, sub: str, email: str, now: datetime | None = None) -> str:
    """Build and sign a refresh token with the refresh secret.

    The jti makes every token string unique, even for two pairs minted
    for the same admin within the same second.
    """
    now = now or datetime.now(UTC)
    payload = _claims(sub, email, REFRESH_AUDIENCE, now, refresh_token_ttl())
    return jwt.encode(payload, SETTINGS.jwt_refresh_secret, algorithm=ALGORITHM)


def decode_refresh_token(token: str) -> dict:
    """Verify a refresh token. Pins audience to REFRESH_AUDIENCE.

    Raises jwt.ExpiredSignatureError, jwt.InvalidTokenError on failure.
    """
    return jwt.decode(
        token,
        SETTINGS.jwt_refresh_secret,
        algorithms=[ALGORITHM],
        issuer=ISSUER,
        audience=REFRESH_AUDIENCE,
        options={"require": _REQUIRED_CLAIMS},
    )


async def issue_token_pair(
    stores: Stores,
    admin_id: UUID,
    email: str,
    *,
    now: datetime | None = None,
) -> TokenPair:
    """Mint an access/refresh pair and record the refresh token.

    The ledger expiry is measured from ``now``, never carried over from a
    previous token.
    """
    now = now or datetime.now(UTC)
    sub = str(admin_id)
    access = create_access_token(sub=sub, email=email, now=now)
    refresh = create_refresh_token(sub=sub, email=email, now=now)

    await stores.refresh_tokens.add(
        RefreshTokenRecord.new(
            token=refresh,
            admin_id=admin_id,
            ttl=refresh_token_ttl(),
            now=now,
        )
    )
    return TokenPair(access_token=access, refresh_token=refresh)
