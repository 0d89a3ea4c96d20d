"""Synchronous API client with silent token refresh.

    with PortalClient("http://localhost:8000") as portal:
        portal.login("a@x.com", "correct horse")
        portal.request("POST", "/events", json={...})

Protected calls carry the access token.  When one comes back 401 with a
``WWW-Authenticate: Bearer`` challenge (the access token was rejected),
the client rotates its refresh token once and replays the call.  A
step-up failure (401 without the challenge) is returned as-is: a new
token would not fix a wrong password.

If the refresh itself is refused there is nothing left to try: tokens
are dropped and SessionExpired is raised so the caller can log in again.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

logger = logging.getLogger(__name__)


class SessionExpired(Exception):
    """The refresh token was refused; a new login is required."""


class PortalClient:
    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        *,
        http: httpx.Client | None = None,
        timeout: float = 10.0,
    ) -> None:
        self._http = http or httpx.Client(base_url=base_url, timeout=timeout)
        self._owns_http = http is None
        self.access_token: str | None = None
        self.refresh_token: str | None = None

    # --- context manager ---------------------------------------------------

    def __enter__(self) -> PortalClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_http:
            self._http.close()

    # --- session -----------------------------------------------------------

    def clear_tokens(self) -> None:
        self.access_token = None
        self.refresh_token = None

    def register(self, email: str, password: str) -> dict[str, Any]:
        r = self._http.post("/auth/register", json={"email": email, "password": password})
        r.raise_for_status()
        return r.json()

    def login(self, email: str, password: str) -> dict[str, Any]:
        r = self._http.post("/auth/login", json={"email": email, "password": password})
        r.raise_for_status()
        body = r.json()
        self.access_token = body["accessToken"]
        self.refresh_token = body["refreshToken"]
        return body["admin"]

    def refresh(self) -> None:
        if not self.refresh_token:
            self.clear_tokens()
            raise SessionExpired("No refresh token; log in again")

        r = self._http.post("/auth/refresh", json={"refreshToken": self.refresh_token})
        if r.status_code == httpx.codes.UNAUTHORIZED:
            logger.info("Refresh refused; session expired")
            self.clear_tokens()
            raise SessionExpired(r.json().get("detail", "Session expired"))
        r.raise_for_status()

        body = r.json()
        self.access_token = body["accessToken"]
        self.refresh_token = body["refreshToken"]

    def logout(self) -> None:
        token = self.refresh_token
        self.clear_tokens()
        if token:
            self._http.post("/auth/logout", json={"refreshToken": token})

    # --- requests ----------------------------------------------------------

    def _send(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        headers = dict(kwargs.pop("headers", None) or {})
        if self.access_token:
            headers["Authorization"] = f"Bearer {self.access_token}"
        return self._http.request(method, url, headers=headers, **kwargs)

    def request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """Send a protected request, refreshing and retrying once on 401."""
        r = self._send(method, url, **kwargs)
        if r.status_code != httpx.codes.UNAUTHORIZED:
            return r
        if "bearer" not in r.headers.get("www-authenticate", "").lower():
            return r

        logger.debug("Access token rejected on %s %s; refreshing", method, url)
        self.refresh()
        return self._send(method, url, **kwargs)

    def public(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """Send an unauthenticated request.  Never carries tokens."""
        return self._http.request(method, url, **kwargs)
