"""Cache store backends and the startup factory that picks one."""

from watermark_service.infrastructure.cache.factory import create_cache_store
from watermark_service.infrastructure.cache.local_store import LocalFileCacheStore
from watermark_service.infrastructure.cache.redis_store import RedisCacheStore, create_redis_connection

__all__ = [
    "LocalFileCacheStore",
    "RedisCacheStore",
    "create_cache_store",
    "create_redis_connection",
]
