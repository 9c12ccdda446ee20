"""
Cache-Related Exceptions

Errors raised by cache store backends (Redis, local filesystem). The
orchestrator treats all of them as recoverable.
"""

from watermark_service.core.exceptions.base import WatermarkServiceError


class CacheError(WatermarkServiceError):
    """Base exception for cache-related errors."""
    pass


class CacheUnavailableError(CacheError):
    """
    Raised when the cache backend cannot serve an operation.

    Common causes:
    - Redis server is down or unreachable
    - Operation timed out
    - Cache directory is not readable/writable

    Distinct from a miss: a miss is reported as ``None`` from ``get``.
    """
    pass
