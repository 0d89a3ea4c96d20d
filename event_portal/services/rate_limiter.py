"""Token-bucket rate limiting for the credential endpoints.

Each client key owns a bucket of ``capacity`` tokens that refills at
``refill_rate`` tokens per second.  A request takes one token; an empty
bucket means 429 until the next token drips in.  Bursts up to the
capacity are allowed, while the long-run rate is capped by the refill.

Login and registration are the targets: both run an Argon2 hash, and
login is the password-guessing surface.

Two backends share one Protocol, as the repos do: an in-process dict for
dev and tests, and Redis (one Lua script per check, so the
read-refill-take-write cycle is atomic across API instances).
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@dataclass(frozen=True, slots=True)
class RateLimitResult:
    """Outcome of one check.  ``retry_after`` is in seconds, 0 when allowed."""

    allowed: bool
    remaining: int
    limit: int
    retry_after: float


@dataclass(frozen=True, slots=True)
class RateLimitConfig:
    """capacity: burst size.  refill_rate: tokens per second."""

    capacity: int = 60
    refill_rate: float = 1.0


# 10 attempts, then roughly one every six seconds per client.
CREDENTIALS_LIMIT = RateLimitConfig(capacity=10, refill_rate=0.17)


@runtime_checkable
class RateLimiter(Protocol):
    async def check(self, key: str, config: RateLimitConfig) -> RateLimitResult: ...
    async def reset(self, key: str) -> None: ...


def _take(
    tokens: float, elapsed: float, config: RateLimitConfig
) -> tuple[float, RateLimitResult]:
    tokens = min(config.capacity, tokens + elapsed * config.refill_rate)
    if tokens >= 1:
        tokens -= 1
        return tokens, RateLimitResult(
            allowed=True, remaining=int(tokens), limit=config.capacity, retry_after=0
        )
    return tokens, RateLimitResult(
        allowed=False,
        remaining=0,
        limit=config.capacity,
        retry_after=(1 - tokens) / config.refill_rate,
    )


class InMemoryRateLimiter:
    """Per-process buckets.  Each API instance counts separately."""

    def __init__(self) -> None:
        # key -> (tokens, last_seen monotonic time)
        self._buckets: dict[str, tuple[float, float]] = {}

    async def check(self, key: str, config: RateLimitConfig) -> RateLimitResult:
        now = time.monotonic()
        tokens, last_seen = self._buckets.get(key, (float(config.capacity), now))
        tokens, result = _take(tokens, now - last_seen, config)
        self._buckets[key] = (tokens, now)
        return result

    async def reset(self, key: str) -> None:
        self._buckets.pop(key, None)

    def clear(self) -> None:
        self._buckets.clear()


class RedisRateLimiter:
    """Buckets shared by every API instance, stored as Redis hashes."""

    # KEYS[1] bucket key; ARGV capacity, refill_rate, now (seconds)
    # Returns {allowed 0|1, remaining, retry_after_ms}
    _LUA_SCRIPT = """
    local capacity = tonumber(ARGV[1])
    local rate = tonumber(ARGV[2])
    local now = tonumber(ARGV[3])
    local state = redis.call('HMGET', KEYS[1], 'tokens', 'seen')
    local tokens = tonumber(state[1]) or capacity
    local seen = tonumber(state[2]) or now

    tokens = math.min(capacity, tokens + (now - seen) * rate)
    local allowed = 0
    local retry_ms = 0
    if tokens >= 1 then
        tokens = tokens - 1
        allowed = 1
    else
        retry_ms = math.ceil((1 - tokens) / rate * 1000)
    end

    redis.call('HSET', KEYS[1], 'tokens', tokens, 'seen', now)
    redis.call('EXPIRE', KEYS[1], math.ceil(capacity / rate) + 60)
    return {allowed, math.floor(tokens), retry_ms}
    """

    def __init__(self, redis_client) -> None:
        self._redis = redis_client
        self._script = redis_client.register_script(self._LUA_SCRIPT)

    async def check(self, key: str, config: RateLimitConfig) -> RateLimitResult:
        allowed, remaining, retry_ms = await self._script(
            keys=[f"ratelimit:{key}"],
            args=[config.capacity, config.refill_rate, time.time()],
        )
        return RateLimitResult(
            allowed=bool(allowed),
            remaining=int(remaining),
            limit=config.capacity,
            retry_after=retry_ms / 1000,
        )

    async def reset(self, key: str) -> None:
        await self._redis.delete(f"ratelimit:{key}")
