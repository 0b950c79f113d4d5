"""Cache for per-property AfA settings.

An explicit object handed to the service rather than module state. Both
tiers expire after `ttl_seconds`, so edits to stored settings show up
without a restart; `invalidate` drops an entry immediately. Redis is an
optional second tier; when it is unreachable the in-process dict still
works.
"""

import logging
import time
from typing import Awaitable, Callable

import redis.asyncio as redis
from pydantic import TypeAdapter

from src.config import settings
from src.models.afa import AfaSettings

logger = logging.getLogger(__name__)

_afa_adapter = TypeAdapter(AfaSettings)

Loader = Callable[[], Awaitable[AfaSettings | None]]


class AfaSettingsCache:
    def __init__(self, redis_client: redis.Redis | None = None, ttl_seconds: int | None = None):
        self._local: dict[tuple[str, str], tuple[AfaSettings | None, float]] = {}
        self._redis = redis_client
        self.ttl_seconds = ttl_seconds if ttl_seconds is not None else settings.afa_cache_ttl_seconds

    @classmethod
    def from_settings(cls) -> "AfaSettingsCache":
        client = redis.from_url(settings.redis_url, decode_responses=True) if settings.redis_url else None
        return cls(redis_client=client)

    @staticmethod
    def _key(user_id: str, property_id: str) -> str:
        return f"anlagev:afa:{user_id}:{property_id}"

    async def get_or_load(self, user_id: str, property_id: str, loader: Loader) -> AfaSettings | None:
        local_key = (user_id, property_id)
        entry = self._local.get(local_key)
        if entry is not None:
            value, expires_at = entry
            if time.monotonic() < expires_at:
                return value
            del self._local[local_key]

        key = self._key(user_id, property_id)
        if self._redis is not None:
            try:
                raw = await self._redis.get(key)
                if raw is not None:
                    logger.debug("Cache hit: %s", key)
                    value = _afa_adapter.validate_json(raw)
                    self._remember(local_key, value)
                    return value
            except Exception:
                logger.warning("Redis unavailable, skipping cache read for %s", key)

        value = await loader()
        self._remember(local_key, value)

        # "Not configured" stays local only
        if self._redis is not None and value is not None:
            try:
                await self._redis.setex(key, self.ttl_seconds, _afa_adapter.dump_json(value))
            except Exception:
                logger.warning("Failed to write cache for %s", key)
        return value

    def _remember(self, local_key: tuple[str, str], value: AfaSettings | None) -> None:
        self._local[local_key] = (value, time.monotonic() + self.ttl_seconds)

    async def invalidate(self, user_id: str, property_id: str) -> None:
        self._local.pop((user_id, property_id), None)
        if self._redis is not None:
            try:
                await self._redis.delete(self._key(user_id, property_id))
            except Exception:
                logger.warning("Failed to invalidate cache for property %s", property_id)

    def clear(self) -> None:
        """Drop the in-process tier. Redis entries expire on their own."""
        self._local.clear()
