from __future__ import annotations

import logging
from dataclasses import dataclass
from uuid import UUID

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHash, VerificationError, VerifyMismatchError

from event_portal.core.metrics import AUTH_EVENTS
from event_portal.db.stores import Stores
from event_portal.models.admin import Admin, normalize_email
from event_portal.services.errors import (
    Conflict,
    IdentityMissingError,
    InvalidCredentials,
    InvalidPassword,
)
from event_portal.services.token_service import TokenPair, issue_token_pair

logger = logging.getLogger(__name__)

# Argon2 hash strings encode parameters + salt
_ph = PasswordHasher()

# Verified against when the email is unknown, so a miss costs one Argon2
# verification just like a wrong password does.
_DUMMY_HASH = _ph.hash("event-portal-dummy-password")


@dataclass(frozen=True, slots=True)
class LoginResult:
    tokens: TokenPair
    admin: Admin


def hash_password(plain_password: str) -> str:
    if not plain_password:
        raise ValueError("password must be non-empty")
    return _ph.hash(plain_password)


# verify_password() must catch Argon2 exceptions and return False
def verify_password(plain_password: str, password_hash: str) -> bool:
    if not plain_password or not password_hash:
        return False
    try:
        return _ph.verify(password_hash, plain_password)
    except (VerifyMismatchError, VerificationError, InvalidHash):
        return False


async def register_admin(stores: Stores, email: str, password: str) -> Admin:
    email = normalize_email(email)
    if await stores.admins.get_by_email(email) is not None:
        logger.info("Registration rejected: duplicate email")
        raise Conflict("Email already registered")

    admin = Admin.new(email=email, password_hash=hash_password(password))
    try:
        await stores.admins.add(admin)
    except ValueError:
        raise Conflict("Email already registered") from None

    logger.info("Admin registered: admin=%s", admin.id)
    return admin


async def _rehash_if_needed(stores: Stores, admin: Admin, password: str) -> None:
    try:
        if _ph.check_needs_rehash(admin.password_hash):
            await stores.admins.update_password_hash(admin.id, _ph.hash(password))
            logger.info("Rehashed password for admin=%s", admin.id)
    except InvalidHash:
        logger.warning("Stored hash for admin=%s is not a valid argon2 hash", admin.id)


async def login(stores: Stores, email: str, password: str) -> LoginResult:
    """Check credentials and issue a token pair.

    Unknown email and wrong password raise the same InvalidCredentials so
    the response cannot be used to probe which emails are registered.
    """
    admin = await stores.admins.get_by_email(email)
    if admin is None:
        verify_password(password, _DUMMY_HASH)
        AUTH_EVENTS.labels(event="login", outcome="invalid_credentials").inc()
        logger.warning("Login failed: invalid credentials")
        raise InvalidCredentials("Invalid credentials")

    if not verify_password(password, admin.password_hash):
        AUTH_EVENTS.labels(event="login", outcome="invalid_credentials").inc()
        logger.warning("Login failed: invalid credentials")
        raise InvalidCredentials("Invalid credentials")

    await _rehash_if_needed(stores, admin, password)

    tokens = await issue_token_pair(stores, admin.id, admin.email)
    AUTH_EVENTS.labels(event="login", outcome="success").inc()
    logger.info("Login succeeded: admin=%s", admin.id)
    return LoginResult(tokens=tokens, admin=admin)


async def verify_admin_password(stores: Stores, admin_id: UUID, password: str) -> None:
    """Step-up check before a destructive operation.

    ``admin_id`` comes from an already-validated session, so a missing
    admin is a consistency fault rather than a client error.
    """
    admin = await stores.admins.get_by_id(admin_id)
    if admin is None:
        raise IdentityMissingError(f"validated admin {admin_id} no longer exists")

    if not verify_password(password, admin.password_hash):
        AUTH_EVENTS.labels(event="step_up", outcome="invalid_password").inc()
        logger.warning("Step-up verification failed: admin=%s", admin_id)
        raise InvalidPassword("Invalid password")

    AUTH_EVENTS.labels(event="step_up", outcome="success").inc()
