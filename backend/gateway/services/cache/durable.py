"""Durable object store for transformed images.

Entries are raw image bytes keyed by the semantic cache key and are
stored without expiry; eviction is left to the store's own policy.
"""

import logging
from typing import Protocol

from gateway.redis.client import RedisClient

logger = logging.getLogger(__name__)


class ObjectStore(Protocol):
    """Key-value contract for the durable tier."""

    async def get(self, key: str) -> bytes | None: ...

    async def put(self, key: str, data: bytes) -> None: ...


class RedisObjectStore:
    """Durable tier backed by Redis string values."""

    def __init__(self, redis: RedisClient):
        self._redis = redis

    async def get(self, key: str) -> bytes | None:
        """
        Fetch stored image bytes.

        Args:
            key: Durable cache key

        Returns:
            Image bytes, or None on a miss
        """
        data = await self._redis.client.get(key)
        if not data:
            return None
        return bytes(data)

    async def put(self, key: str, data: bytes) -> None:
        """Store image bytes under key, replacing any existing value."""
        await self._redis.client.set(key, data)
        logger.debug(f"Stored {len(data)} bytes for {key}")
