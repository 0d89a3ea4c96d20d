from __future__ import annotations

import logging
from typing import Annotated

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer

from event_portal.db.stores import Stores, get_stores
from event_portal.middleware.request_context import bind_admin
from event_portal.models.identity import AdminIdentity
from event_portal.services import session_service
from event_portal.services.errors import Unauthenticated

logger = logging.getLogger(__name__)

# auto_error=False so a missing header goes through the same error path
# as a bad token.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login", auto_error=False)

StoresDep = Annotated[Stores, Depends(get_stores)]


async def require_admin(
    raw_token: Annotated[str | None, Depends(oauth2_scheme)],
    stores: StoresDep,
) -> AdminIdentity:
    """Validate the bearer token on every protected request.

    Used as a FastAPI dependency.  Signature, expiry and the continued
    existence of the admin are all checked; nothing is cached between
    requests.
    """
    if not raw_token:
        logger.info("Request without bearer token rejected")
        raise Unauthenticated("Not authenticated")

    identity = await session_service.authenticate_access_token(stores, raw_token)
    bind_admin(str(identity.id))
    logger.debug("Token validated for admin=%s", identity.id)
    return identity


CurrentAdmin = Annotated[AdminIdentity, Depends(require_admin)]
