"""Session lifecycle: access-token validation, refresh rotation, logout.

Access tokens are validated statelessly, except that the subject must
still exist.  That lookup runs on every request and is never cached, so
removing an admin locks out their outstanding access tokens immediately.

Refresh follows a strict single-use protocol:

    1. verify the JWT under the refresh secret (signature, expiry, audience)
    2. consume the ledger row for that exact token string
    3. issue a new pair, which writes a new ledger row expiring now + TTL

Step 2 is the gate.  The ledger reports a row back to exactly one
consumer, so two requests racing with the same token cannot both rotate.
With SQL stores steps 2 and 3 run in the request's transaction: if
issuing fails, the delete is rolled back along with it.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from uuid import UUID

import jwt

from event_portal.core.metrics import AUTH_EVENTS
from event_portal.db.stores import Stores
from event_portal.models.identity import AdminIdentity
from event_portal.services import token_service
from event_portal.services.errors import Unauthenticated
from event_portal.services.token_service import TokenPair

logger = logging.getLogger(__name__)


def _subject(claims: dict) -> UUID:
    try:
        return UUID(claims["sub"])
    except (KeyError, ValueError, TypeError):
        raise Unauthenticated("Invalid token") from None


async def authenticate_access_token(stores: Stores, raw_token: str) -> AdminIdentity:
    """Validate a bearer token and resolve it to a live admin."""
    try:
        claims = token_service.decode_access_token(raw_token)
    except jwt.ExpiredSignatureError:
        logger.warning("Expired access token rejected")
        raise Unauthenticated("Token expired") from None
    except jwt.InvalidTokenError as e:
        logger.warning("Invalid access token rejected: %s", e)
        raise Unauthenticated("Invalid token") from None

    admin_id = _subject(claims)
    admin = await stores.admins.get_by_id(admin_id)
    if admin is None:
        logger.warning("Access token subject no longer exists: admin=%s", admin_id)
        raise Unauthenticated("Invalid token")

    return AdminIdentity(id=admin.id, email=admin.email)


async def refresh_session(
    stores: Stores,
    token: str,
    *,
    now: datetime | None = None,
) -> TokenPair:
    now = now or datetime.now(UTC)

    try:
        token_service.decode_refresh_token(token)
    except jwt.ExpiredSignatureError:
        AUTH_EVENTS.labels(event="refresh", outcome="expired").inc()
        logger.warning("Refresh rejected: token expired")
        raise Unauthenticated("Invalid refresh token") from None
    except jwt.InvalidTokenError as e:
        AUTH_EVENTS.labels(event="refresh", outcome="invalid_token").inc()
        logger.warning("Refresh rejected: %s", e)
        raise Unauthenticated("Invalid refresh token") from None

    record = await stores.refresh_tokens.consume(token, now)
    if record is None:
        # Absent, expired in the ledger, or already rotated/revoked.
        AUTH_EVENTS.labels(event="refresh", outcome="not_found").inc()
        logger.warning("Refresh rejected: token not in ledger")
        raise Unauthenticated("Invalid refresh token")

    admin = await stores.admins.get_by_id(record.admin_id)
    if admin is None:
        AUTH_EVENTS.labels(event="refresh", outcome="not_found").inc()
        logger.warning("Refresh rejected: admin=%s no longer exists", record.admin_id)
        raise Unauthenticated("Invalid refresh token")

    pair = await token_service.issue_token_pair(stores, admin.id, admin.email, now=now)
    AUTH_EVENTS.labels(event="refresh", outcome="success").inc()
    logger.info("Refresh token rotated: admin=%s", admin.id)
    return pair


async def logout(stores: Stores, token: str) -> None:
    """Forget a refresh token.  Unknown or malformed tokens are fine.

    Access tokens already handed out keep working until they expire.
    """
    removed = await stores.refresh_tokens.delete_by_token(token)
    AUTH_EVENTS.labels(event="logout", outcome="success").inc()
    if removed:
        logger.info("Logout: refresh token revoked")
    else:
        logger.info("Logout: refresh token was not in the ledger")


async def purge_expired_refresh_tokens(stores: Stores, *, now: datetime | None = None) -> int:
    now = now or datetime.now(UTC)
    removed = await stores.refresh_tokens.purge_expired(now)
    logger.info("Purged %d expired refresh tokens", removed)
    return removed
