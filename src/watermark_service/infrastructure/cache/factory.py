"""
Cache Store Factory

Selects the cache backend once, at startup, from validated settings. There
is no runtime switching and no fallback: an unknown CACHE_PROVIDER stops
the service from starting.
"""

from watermark_service.config.constants import CacheProvider, Stage
from watermark_service.config.settings import Settings
from watermark_service.core.exceptions import ConfigurationError
from watermark_service.core.interfaces.cache import CacheStore
from watermark_service.core.logging.logger import get_logger
from watermark_service.infrastructure.cache.local_store import LocalFileCacheStore
from watermark_service.infrastructure.cache.redis_store import RedisCacheStore, create_redis_connection

logger = get_logger(__name__)


def create_cache_store(settings: Settings) -> CacheStore:
    """
    Build the configured cache backend.

    Raises:
        ConfigurationError: Unknown CACHE_PROVIDER, or the local cache root
            cannot be created
    """
    provider = settings.cache.CACHE_PROVIDER
    ttl = settings.cache.CACHE_TTL

    if provider == CacheProvider.REDIS.value:
        redis_settings = settings.redis
        store = RedisCacheStore(
            client=create_redis_connection(redis_settings),
            ttl=ttl,
            key_prefix=redis_settings.REDIS_KEY_PREFIX,
            scan_count=redis_settings.REDIS_SCAN_COUNT,
        )
        logger.info(
            "Using Redis cache store",
            stage=Stage.STARTUP,
            address=redis_settings.REDIS_URL or f"{redis_settings.REDIS_HOST}:{redis_settings.REDIS_PORT}",
            ttl=ttl,
        )
        return store

    if provider == CacheProvider.LOCAL.value:
        store = LocalFileCacheStore(path=settings.cache.LOCAL_CACHE_PATH, ttl=ttl)
        logger.info(
            "Using local filesystem cache store",
            stage=Stage.STARTUP,
            path=str(store.root),
            ttl=ttl,
        )
        return store

    raise ConfigurationError(
        f"Unknown CACHE_PROVIDER '{provider}'",
        details={"provider": provider, "supported": [p.value for p in CacheProvider]},
    )
