"""Rate-limit store selection."""

from __future__ import annotations

from contact_gate.config.loader import ContactSettings
from contact_gate.store.base import WindowStore
from contact_gate.store.memory import MemoryWindowStore
from contact_gate.store.redis import RedisWindowStore


def create_store(settings: ContactSettings) -> WindowStore:
    """Build the store named by ``rate_limit_backend`` (memory or redis)."""
    if settings.rate_limit_backend == "redis":
        return RedisWindowStore(
            settings.redis_url,
            max_requests=settings.rate_limit_max,
            window_seconds=settings.rate_limit_window_seconds,
        )
    return MemoryWindowStore(
        max_requests=settings.rate_limit_max,
        window_seconds=settings.rate_limit_window_seconds,
    )
