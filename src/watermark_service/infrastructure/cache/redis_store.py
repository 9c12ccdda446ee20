"""
Redis Cache Store

Remote cache backend with native TTL.

Architecture:
    RedisCacheStore (CacheStore implementation)
        └── create_redis_connection (pooled redis.asyncio client)

- ``set`` writes with ``EX <ttl>``; Redis expires entries on its own
- ``delete_by_pattern`` is SCAN MATCH followed by a single DEL. It is not
  atomic: keys written during the scan may survive, and keys removed by
  someone else before the DEL are simply not counted
- every key and pattern is prefixed with the configured namespace
"""

import redis.asyncio as redis
from redis.asyncio.connection import ConnectionPool
from redis.exceptions import RedisError

from watermark_service.config.constants import Stage
from watermark_service.config.settings import RedisSettings
from watermark_service.core.exceptions import CacheUnavailableError
from watermark_service.core.logging.logger import get_logger

logger = get_logger(__name__)


def create_redis_connection(redis_settings: RedisSettings) -> redis.Redis:
    """
    Build a pooled Redis client.

    REDIS_URL, when set, wins over the host/port/db/password fields. The
    client returns bytes; cached payloads are binary images.

    No network I/O happens here. The pool connects on first command and
    is closed together with the client.
    """
    pool_options = {
        "max_connections": redis_settings.REDIS_MAX_CONNECTIONS,
        "socket_timeout": redis_settings.REDIS_SOCKET_TIMEOUT,
        "socket_connect_timeout": redis_settings.REDIS_SOCKET_CONNECT_TIMEOUT,
        "decode_responses": False,
    }

    if redis_settings.REDIS_URL:
        pool = ConnectionPool.from_url(redis_settings.REDIS_URL, **pool_options)
    else:
        pool = ConnectionPool(
            host=redis_settings.REDIS_HOST,
            port=redis_settings.REDIS_PORT,
            db=redis_settings.REDIS_DB,
            password=redis_settings.REDIS_PASSWORD,
            **pool_options,
        )

    return redis.Redis.from_pool(pool)


class RedisCacheStore:
    """
    CacheStore backed by Redis.

    Safe for unbounded concurrent use: every call borrows a connection from
    the client's pool.

    Args:
        client: redis.asyncio client (bytes responses)
        ttl: Entry TTL in seconds
        key_prefix: Namespace prepended to every key and pattern
        scan_count: COUNT hint for SCAN batches
    """

    def __init__(self, client: redis.Redis, ttl: int, key_prefix: str = "", scan_count: int = 500):
        self._redis = client
        self._ttl = ttl
        self._prefix = key_prefix
        self._scan_count = scan_count

    def _namespaced(self, key: str) -> str:
        return f"{self._prefix}{key}"

    async def get(self, key: str) -> bytes | None:
        """Get a payload; None on miss."""
        try:
            return await self._redis.get(self._namespaced(key))
        except RedisError as e:
            logger.error("Redis GET failed", stage=Stage.CACHE_LOOKUP, key=key, error=str(e))
            raise CacheUnavailableError.from_exception(e, message=f"Redis GET failed: {e}", key=key) from e

    async def set(self, key: str, data: bytes) -> None:
        """Store a payload with the configured TTL."""
        try:
            await self._redis.set(self._namespaced(key), data, ex=self._ttl)
        except RedisError as e:
            logger.error("Redis SET failed", stage=Stage.CACHE_STORE, key=key, error=str(e))
            raise CacheUnavailableError.from_exception(e, message=f"Redis SET failed: {e}", key=key) from e

    async def delete(self, key: str) -> None:
        """Delete one key."""
        try:
            await self._redis.delete(self._namespaced(key))
        except RedisError as e:
            logger.error("Redis DEL failed", stage=Stage.INVALIDATION, key=key, error=str(e))
            raise CacheUnavailableError.from_exception(e, message=f"Redis DEL failed: {e}", key=key) from e

    async def delete_by_pattern(self, pattern: str) -> int:
        """
        SCAN for keys matching ``pattern`` and remove them with one DEL.

        Returns:
            int: Number of keys Redis reports as deleted
        """
        match = self._namespaced(pattern)

        try:
            keys = [key async for key in self._redis.scan_iter(match=match, count=self._scan_count)]
        except RedisError as e:
            logger.error("Redis SCAN failed", stage=Stage.INVALIDATION, pattern=pattern, error=str(e))
            raise CacheUnavailableError.from_exception(
                e, message=f"Failed to scan cache keys: {e}", pattern=pattern
            ) from e

        if not keys:
            logger.debug("No keys matched pattern", stage=Stage.INVALIDATION, pattern=pattern)
            return 0

        try:
            deleted = await self._redis.delete(*keys)
        except RedisError as e:
            logger.error(
                "Redis bulk DEL failed",
                stage=Stage.INVALIDATION,
                pattern=pattern,
                matched=len(keys),
                error=str(e),
            )
            raise CacheUnavailableError.from_exception(
                e, message=f"Failed to delete cache keys: {e}", pattern=pattern
            ) from e

        logger.info(
            "Deleted keys by pattern",
            stage=Stage.INVALIDATION,
            pattern=pattern,
            matched=len(keys),
            deleted=deleted,
        )
        return int(deleted)

    async def ping(self) -> bool:
        """Check Redis connection health."""
        try:
            return bool(await self._redis.ping())
        except RedisError as e:
            logger.warning("Redis ping failed", error=str(e))
            return False

    async def close(self) -> None:
        """Close the client and its pool."""
        await self._redis.aclose()
        logger.info("Redis cache store closed")
