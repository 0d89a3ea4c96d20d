"""Refresh token ledger: the server-side record of live refresh tokens.

Only refresh tokens are stored.  Access tokens stay stateless, so the
per-request auth check costs one identity lookup and nothing else, and
revocation happens at refresh-token granularity.

consume() is the rotation gate.  It removes the presented token's record
and reports it back only to the single caller whose delete actually took
the row.  Two concurrent refreshes with the same token therefore get one
record and one None between them; the loser is told the token is invalid.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol

from event_portal.models.refresh_token import RefreshTokenRecord


class RefreshTokenRepo(Protocol):
    async def add(self, record: RefreshTokenRecord) -> None: ...
    async def get_by_token(self, token: str) -> RefreshTokenRecord | None: ...
    async def consume(self, token: str, now: datetime) -> RefreshTokenRecord | None: ...
    async def delete_by_token(self, token: str) -> bool: ...
    async def purge_expired(self, now: datetime) -> int: ...


class InMemoryRefreshTokenRepo:
    """Dict-backed ledger for dev and tests.

    Each method body runs without an await point, so under a single event
    loop every operation is atomic with respect to other requests.
    """

    def __init__(self) -> None:
        self._by_token: dict[str, RefreshTokenRecord] = {}

    async def add(self, record: RefreshTokenRecord) -> None:
        if record.token in self._by_token:
            raise ValueError("refresh token already recorded")
        self._by_token[record.token] = record

    async def get_by_token(self, token: str) -> RefreshTokenRecord | None:
        return self._by_token.get(token)

    async def consume(self, token: str, now: datetime) -> RefreshTokenRecord | None:
        record = self._by_token.pop(token, None)
        if record is None:
            return None
        if record.is_expired(now):
            # Lazy expiry: the lookup that finds a dead token removes it.
            return None
        return record

    async def delete_by_token(self, token: str) -> bool:
        return self._by_token.pop(token, None) is not None

    async def purge_expired(self, now: datetime) -> int:
        doomed = [t for t, r in self._by_token.items() if r.is_expired(now)]
        for t in doomed:
            del self._by_token[t]
        return len(doomed)

    def clear(self) -> None:
        self._by_token.clear()
