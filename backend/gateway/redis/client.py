"""Async Redis connection backing the durable image tier."""

import logging

import redis.asyncio as redis
from redis.asyncio import ConnectionPool, Redis
from redis.asyncio.retry import Retry
from redis.backoff import NoBackoff

from gateway.config import Settings

logger = logging.getLogger(__name__)


class RedisClient:
    """
    Pooled Redis connection for image bytes.

    Values are binary, so responses are never decoded. Commands are not
    retried: a timed-out or failed command raises on the first attempt.
    """

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self._pool: ConnectionPool | None = None
        self._client: Redis | None = None

    async def connect(self) -> None:
        """Open the pool and verify the server answers."""
        if self._client is not None:
            return

        self._pool = ConnectionPool.from_url(
            self._settings.redis_url,
            max_connections=self._settings.redis_max_connections,
            decode_responses=False,
            socket_timeout=self._settings.redis_socket_timeout,
            socket_connect_timeout=self._settings.redis_socket_timeout,
            retry=Retry(NoBackoff(), 0),
        )
        client = Redis(connection_pool=self._pool)

        try:
            await client.ping()
        except redis.ConnectionError as e:
            logger.error(f"Failed to connect to Redis at {self._settings.redis_url}: {e}")
            await self._pool.disconnect()
            self._pool = None
            raise

        self._client = client
        logger.info("Redis connection established")

    async def disconnect(self) -> None:
        if self._pool:
            await self._pool.disconnect()
            self._pool = None
            self._client = None
            logger.info("Redis connection closed")

    @property
    def client(self) -> Redis:
        if self._client is None:
            raise RuntimeError("Redis client not connected. Call connect() first.")
        return self._client

    async def health_check(self) -> bool:
        """Ping the server; any failure reports unhealthy."""
        try:
            await self.client.ping()
            return True
        except Exception as e:
            logger.error(f"Redis health check failed: {e}")
            return False
