"""
Redis Connection Management

Redis connection singleton plus the reminder ledger stored in it.
Redis is optional: when it is unreachable the ledger degrades to an
in-process store and the sweep keeps working.
"""

import logging
from typing import Optional

import redis.asyncio as redis
from redis.asyncio import Redis
from redis.asyncio.retry import Retry
from redis.backoff import ExponentialBackoff
from redis.exceptions import ConnectionError, TimeoutError, RedisError

from app.config import settings
from app.core.scheduling.reminders import InMemoryReminderLedger

# Logger
logger = logging.getLogger(__name__)

# App prefix for namespacing (allows multiple apps/versions on same Redis)
APP_PREFIX = "hospital:v1:"


class RedisClient:
    """
    Manages Redis connection as a singleton.

    Features:
    - Connection pooling
    - Automatic retries
    - Timeouts
    - Graceful failure handling
    """

    _client: Optional[Redis] = None
    _connected: bool = False

    @classmethod
    async def get_client(cls) -> Optional[Redis]:
        """
        Get or create Redis client.

        Returns:
            Redis client or None if connection fails
        """
        if cls._client is not None and cls._connected:
            return cls._client

        try:
            retry = Retry(ExponentialBackoff(), retries=3)

            cls._client = redis.from_url(
                settings.redis_url,
                encoding="utf-8",
                decode_responses=True,
                socket_connect_timeout=5.0,
                socket_timeout=5.0,
                retry_on_timeout=True,
                retry=retry,
            )

            await cls._client.ping()
            cls._connected = True
            logger.info("Redis connection established successfully")
            return cls._client

        except (ConnectionError, TimeoutError, RedisError) as e:
            logger.error(f"Failed to connect to Redis: {e}")
            cls._connected = False
            cls._client = None
            return None
        except Exception as e:
            logger.error(f"Unexpected error connecting to Redis: {e}")
            cls._connected = False
            cls._client = None
            return None

    @classmethod
    async def close(cls) -> None:
        """Close Redis connection."""
        if cls._client is not None:
            try:
                await cls._client.aclose()
                logger.info("Redis connection closed")
            except RedisError as e:
                logger.error(f"Error closing Redis connection: {e}")
            finally:
                cls._client = None
                cls._connected = False

    @classmethod
    def is_connected(cls) -> bool:
        """Check if Redis is connected."""
        return cls._connected


async def get_redis() -> Optional[Redis]:
    """Redis client, or None while Redis is unavailable."""
    return await RedisClient.get_client()


class RedisReminderLedger:
    """
    Sent-reminder markers in Redis.

    Key pattern: hospital:v1:reminder:{appointment_id}:{start}:{window}

    ``claim`` is a single ``SET NX EX`` so two concurrent sweeps cannot
    both send the same reminder. Falls back to process memory when Redis
    is down.
    """

    KEY_PREFIX = f"{APP_PREFIX}reminder:"

    def __init__(self, ttl_seconds: int = settings.reminder_dedup_ttl_seconds):
        self.ttl_seconds = ttl_seconds
        self._fallback = InMemoryReminderLedger(ttl_seconds)

    def _key(self, key: str) -> str:
        return f"{self.KEY_PREFIX}{key}"

    async def claim(self, key: str) -> bool:
        client = await get_redis()
        if client is None:
            logger.warning("Redis unavailable, using in-memory reminder ledger")
            return await self._fallback.claim(key)

        try:
            created = await client.set(self._key(key), "1", nx=True, ex=self.ttl_seconds)
            return bool(created)
        except RedisError as e:
            logger.error(f"Failed to record reminder marker {key}: {e}")
            return await self._fallback.claim(key)

    async def release(self, key: str) -> None:
        await self._fallback.release(key)

        client = await get_redis()
        if client is None:
            return
        try:
            await client.delete(self._key(key))
        except RedisError as e:
            logger.error(f"Failed to drop reminder marker {key}: {e}")


async def check_redis_health() -> bool:
    """
    Check Redis connectivity for health checks.

    Returns:
        True if Redis is accessible and responding, False otherwise
    """
    try:
        client = await get_redis()
        if client is None:
            return False

        await client.ping()
        return True

    except RedisError as e:
        logger.error(f"Redis health check failed: {e}")
        return False
