"""Rate limiting as a route dependency.

Only routes that declare it are limited; /health and the event API are
not.  Buckets are keyed by client IP.  The limited routes are the
credential endpoints, which run before any token exists, so nothing in an
Authorization header is trusted to choose the bucket.
"""

from __future__ import annotations

import logging

from fastapi import HTTPException, Request, status
from redis.exceptions import RedisError

from event_portal.core.metrics import RATE_LIMIT_HITS
from event_portal.db.redis import redis_pool
from event_portal.services.rate_limiter import (
    InMemoryRateLimiter,
    RateLimitConfig,
    RateLimiter,
    RedisRateLimiter,
)

logger = logging.getLogger(__name__)

rate_limiter: RateLimiter
if redis_pool is not None:
    rate_limiter = RedisRateLimiter(redis_pool)
else:
    rate_limiter = InMemoryRateLimiter()


def require_rate_limit(config: RateLimitConfig):
    """Dependency factory.

    Usage::

        @router.post("/auth/login", dependencies=[Depends(require_rate_limit(CREDENTIALS_LIMIT))])
    """

    async def _check(request: Request) -> None:
        key = _build_key(request)
        try:
            result = await rate_limiter.check(key, config)
        except RedisError:
            # Fail open: an outage of the throttle must not lock admins out
            logger.exception("Rate limiter backend unavailable, allowing request")
            return

        if not result.allowed:
            RATE_LIMIT_HITS.labels(key_type="ip").inc()
            logger.warning("Rate limit exceeded key=%s", key)
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail="Too many requests",
                headers={
                    "Retry-After": str(int(result.retry_after) + 1),
                    "X-RateLimit-Limit": str(result.limit),
                    "X-RateLimit-Remaining": "0",
                },
            )

    return _check


def _build_key(request: Request) -> str:
    client_ip = request.client.host if request.client else "unknown"
    return f"ip:{client_ip}"
