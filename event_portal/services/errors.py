"""Domain errors raised by the services and rendered by the API layer.

Each class carries the HTTP status it maps to and a default message.  The
handler registered in event_portal.api.errors turns any PortalError into
``{"detail": message}`` with that status.
"""

from __future__ import annotations


class PortalError(Exception):
    status_code: int = 400
    default_message: str = "Bad request"
    headers: dict[str, str] | None = None

    def __init__(self, message: str | None = None, *, status_code: int | None = None) -> None:
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class InvalidCredentials(PortalError):
    """Login email/password mismatch.  Same body whichever factor was wrong."""

    status_code = 401
    default_message = "Invalid credentials"


class Unauthenticated(PortalError):
    """Bad, missing or expired access token; unusable refresh token."""

    status_code = 401
    default_message = "Unauthorized"
    headers = {"WWW-Authenticate": "Bearer"}


class InvalidPassword(PortalError):
    """Step-up verification failed.  The caller is authenticated."""

    status_code = 401
    default_message = "Invalid password"


class Forbidden(PortalError):
    status_code = 403
    default_message = "Forbidden"


class NotFound(PortalError):
    status_code = 404
    default_message = "Not found"


class Conflict(PortalError):
    status_code = 409
    default_message = "Conflict"


class UploadRejected(PortalError):
    status_code = 400
    default_message = "Invalid upload"


class IdentityMissingError(RuntimeError):
    """A session-validated admin id no longer resolves to an admin.

    Not a PortalError: this is an internal consistency fault and surfaces
    as a 500.
    """
