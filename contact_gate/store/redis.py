"""Redis-backed fixed-window rate-limit store shared across processes."""

from __future__ import annotations

import asyncio
import re

import redis.asyncio as aioredis
import structlog

from contact_gate.errors import StoreUnavailable
from contact_gate.store.base import WindowState

logger = structlog.get_logger()

# Redis key prefix
_KEY_PREFIX = "contact:ratelimit"

# Pattern to redact passwords from Redis URLs
_REDIS_URL_PASSWORD = re.compile(r"(rediss?://[^:]*:)[^@]+(@)")

_MAX_RETRIES = 5
_BASE_DELAY = 0.5

# Atomic Lua script: read + conditional increment + expiry in one operation,
# so concurrent workers cannot admit more than max_requests per window.
# Returns [count, admitted (0 or 1), ttl_ms]
_FIXED_WINDOW_LUA = """
local key = KEYS[1]
local max_requests = tonumber(ARGV[1])
local window_ms = tonumber(ARGV[2])

local count = tonumber(redis.call('GET', key) or '0')
local admitted = 0
if count < max_requests then
    count = redis.call('INCR', key)
    admitted = 1
end

local ttl = redis.call('PTTL', key)
if ttl < 0 then
    redis.call('PEXPIRE', key, window_ms)
    ttl = window_ms
end

return {count, admitted, ttl}
"""


def _redact_url(url: str) -> str:
    """Redact password from Redis URL for safe logging."""
    return _REDIS_URL_PASSWORD.sub(r"\1***\2", url)


class RedisWindowStore:
    """Fixed window per key in Redis; the key's TTL is the window.

    Fails closed: when Redis is unreachable ``hit`` raises StoreUnavailable
    instead of admitting unlimited submissions.
    """

    def __init__(
        self,
        url: str,
        max_requests: int = 5,
        window_seconds: int = 900,
        pool_size: int = 10,
    ) -> None:
        self.url = url
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.pool_size = pool_size
        self._client: aioredis.Redis | None = None

    def _key(self, key: str) -> str:
        return f"{_KEY_PREFIX}:{key}"

    async def startup(self) -> None:
        """Connect with exponential backoff; stays disconnected on failure."""
        for attempt in range(1, _MAX_RETRIES + 1):
            try:
                client = aioredis.from_url(
                    self.url,
                    max_connections=self.pool_size,
                    decode_responses=True,
                    socket_connect_timeout=5,
                )
                await client.ping()
                self._client = client
                logger.info("redis_connected", url=_redact_url(self.url), pool_size=self.pool_size)
                return
            except (aioredis.ConnectionError, OSError) as exc:
                delay = _BASE_DELAY * (2 ** (attempt - 1))
                logger.warning(
                    "redis_connect_retry",
                    attempt=attempt,
                    max_retries=_MAX_RETRIES,
                    delay=delay,
                    error=str(exc),
                )
                if attempt == _MAX_RETRIES:
                    logger.error("redis_connect_failed", error=str(exc))
                    self._client = None
                    return
                await asyncio.sleep(delay)

    async def shutdown(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            logger.info("redis_closed")

    async def hit(self, key: str) -> WindowState:
        if self._client is None:
            logger.error("rate_limiter_no_redis", action="fail_closed")
            raise StoreUnavailable()
        try:
            result = await self._client.eval(
                _FIXED_WINDOW_LUA,
                1,  # number of keys
                self._key(key),
                str(self.max_requests),
                str(self.window_seconds * 1000),
            )
        except Exception as exc:
            logger.error("rate_limiter_redis_error", error=str(exc), action="fail_closed")
            raise StoreUnavailable() from exc

        count, admitted, ttl_ms = (int(v) for v in result)
        return WindowState(
            admitted=bool(admitted),
            limit=self.max_requests,
            count=count,
            reset_in=max(0, -(-ttl_ms // 1000)),
        )

    async def count(self, key: str) -> int:
        if self._client is None:
            return 0
        value = await self._client.get(self._key(key))
        return int(value) if value else 0
