"""
Cache Store Protocol

Abstract contract implemented by every cache backend.

Architectural Decision: Protocol-based abstraction
- The orchestrator depends on this contract, never on a concrete backend
- The backend is selected once at startup (see infrastructure.cache.factory)
- Facilitates testing with in-memory or mock implementations
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class CacheStore(Protocol):
    """
    Protocol defining the interface for cache backend implementations.

    Implementations:
    - RedisCacheStore: Redis with native TTL
    - LocalFileCacheStore: filesystem with mtime-based TTL

    A backend failure is raised as CacheUnavailableError and is never
    reported as a miss; absence is reported as ``None``.
    """

    async def get(self, key: str) -> bytes | None:
        """
        Get a cached payload.

        Returns:
            The payload, or None if absent or expired

        Raises:
            CacheUnavailableError: If the backend cannot be read
        """
        ...

    async def set(self, key: str, data: bytes) -> None:
        """
        Store a payload under the backend's configured TTL.

        Raises:
            CacheUnavailableError: If the backend cannot be written
        """
        ...

    async def delete(self, key: str) -> None:
        """
        Delete one key. Deleting an absent key is not an error.

        Raises:
            CacheUnavailableError: If the backend cannot be written
        """
        ...

    async def delete_by_pattern(self, pattern: str) -> int:
        """
        Delete every key matching a glob-style pattern.

        Returns:
            int: Number of entries actually deleted (0 if none matched)

        Raises:
            CacheUnavailableError: If the backend cannot be scanned or written
        """
        ...

    async def ping(self) -> bool:
        """Check if the backend is healthy."""
        ...

    async def close(self) -> None:
        """Release connections or handles."""
        ...

