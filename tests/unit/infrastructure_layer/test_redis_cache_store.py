"""
Unit Tests for RedisCacheStore

The redis.asyncio client is replaced by an AsyncMock; ``scan_iter`` is an
async generator in redis-py and is faked the same way.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from watermark_service.config.settings import RedisSettings
from watermark_service.core.exceptions import CacheUnavailableError
from watermark_service.imaging.cache_key import build_invalidation_pattern
from watermark_service.infrastructure.cache.redis_store import RedisCacheStore, create_redis_connection

TTL = 604800


def _scan_iter_over(keys, error=None):
    calls = []

    async def scan_iter(match=None, count=None):
        calls.append({"match": match, "count": count})
        if error is not None:
            raise error
        for key in keys:
            yield key

    scan_iter.calls = calls
    return scan_iter


@pytest.fixture
def redis_client():
    client = MagicMock()
    client.get = AsyncMock(return_value=None)
    client.set = AsyncMock(return_value=True)
    client.delete = AsyncMock(return_value=0)
    client.ping = AsyncMock(return_value=True)
    client.aclose = AsyncMock()
    client.scan_iter = _scan_iter_over([])
    return client


@pytest.fixture
def store(redis_client):
    return RedisCacheStore(redis_client, ttl=TTL, scan_count=100)


@pytest.mark.unit
class TestRedisStoreOperations:
    """Test get/set/delete."""

    async def test_get_miss(self, store, redis_client):
        """Test that a missing key is None."""
        assert await store.get("image:a:1.00:1x1x1") is None
        redis_client.get.assert_awaited_once_with("image:a:1.00:1x1x1")

    async def test_get_hit(self, store, redis_client):
        """Test that bytes are returned unchanged."""
        redis_client.get.return_value = b"\xff\xd8jpeg"
        assert await store.get("k") == b"\xff\xd8jpeg"

    async def test_set_uses_ttl(self, store, redis_client):
        """Test SET ... EX ttl."""
        await store.set("k", b"data")
        redis_client.set.assert_awaited_once_with("k", b"data", ex=TTL)

    async def test_delete(self, store, redis_client):
        """Test single-key DEL."""
        await store.delete("k")
        redis_client.delete.assert_awaited_once_with("k")

    async def test_key_prefix_applied(self, redis_client):
        """Test namespacing of keys."""
        store = RedisCacheStore(redis_client, ttl=TTL, key_prefix="wm:")
        await store.set("k", b"data")
        await store.get("k")

        redis_client.set.assert_awaited_once_with("wm:k", b"data", ex=TTL)
        redis_client.get.assert_awaited_once_with("wm:k")

    @pytest.mark.parametrize("operation", ["get", "set", "delete"])
    async def test_redis_errors_become_cache_unavailable(self, store, redis_client, operation):
        """Test that backend failures are not reported as misses."""
        getattr(redis_client, operation).side_effect = RedisConnectionError("connection refused")

        with pytest.raises(CacheUnavailableError) as exc_info:
            if operation == "set":
                await store.set("k", b"data")
            else:
                await getattr(store, operation)("k")

        assert exc_info.value.details["original_error"] == "ConnectionError"


@pytest.mark.unit
class TestRedisStorePatternDelete:
    """Test SCAN + DEL invalidation."""

    async def test_scan_then_single_delete(self, store, redis_client):
        """Test that all matches are removed with one DEL and the reported count returned."""
        keys = [b"image:photo-42:12.50:30x20x15", b"image:photo-42:1.00:1x1x1"]
        redis_client.scan_iter = _scan_iter_over(keys)
        redis_client.delete.return_value = 2

        deleted = await store.delete_by_pattern("image:photo-42:*")

        assert deleted == 2
        assert redis_client.scan_iter.calls == [{"match": "image:photo-42:*", "count": 100}]
        redis_client.delete.assert_awaited_once_with(*keys)

    async def test_count_is_what_redis_reports(self, store, redis_client):
        """Test keys removed concurrently by someone else are not counted."""
        redis_client.scan_iter = _scan_iter_over([b"a", b"b", b"c"])
        redis_client.delete.return_value = 1

        assert await store.delete_by_pattern("image:x:*") == 1

    async def test_no_match_skips_delete(self, store, redis_client):
        """Test that DEL is not issued without keys."""
        assert await store.delete_by_pattern("image:none:*") == 0
        redis_client.delete.assert_not_awaited()

    async def test_pattern_is_prefixed(self, redis_client):
        """Test namespacing of the MATCH pattern."""
        redis_client.scan_iter = _scan_iter_over([])
        store = RedisCacheStore(redis_client, ttl=TTL, key_prefix="wm:", scan_count=10)

        await store.delete_by_pattern("image:a:*")

        assert redis_client.scan_iter.calls == [{"match": "wm:image:a:*", "count": 10}]

    async def test_escaped_backslash_reaches_match_unchanged(self, store, redis_client):
        """Test that the doubled backslash class is sent to SCAN as built."""
        await store.delete_by_pattern(build_invalidation_pattern("a\\b"))

        assert redis_client.scan_iter.calls == [{"match": "image:a[\\\\]b:*", "count": 100}]

    async def test_scan_failure(self, store, redis_client):
        """Test SCAN errors."""
        redis_client.scan_iter = _scan_iter_over([], error=RedisConnectionError("down"))

        with pytest.raises(CacheUnavailableError):
            await store.delete_by_pattern("image:a:*")

    async def test_delete_failure(self, store, redis_client):
        """Test bulk DEL errors."""
        redis_client.scan_iter = _scan_iter_over([b"k"])
        redis_client.delete.side_effect = RedisConnectionError("down")

        with pytest.raises(CacheUnavailableError):
            await store.delete_by_pattern("image:a:*")


@pytest.mark.unit
class TestRedisStoreLifecycle:
    """Test ping, close and client construction."""

    async def test_ping(self, store):
        """Test a healthy ping."""
        assert await store.ping() is True

    async def test_ping_failure_is_false(self, store, redis_client):
        """Test that ping never raises."""
        redis_client.ping.side_effect = RedisConnectionError("down")
        assert await store.ping() is False

    async def test_close(self, store, redis_client):
        """Test that close releases the client."""
        await store.close()
        redis_client.aclose.assert_awaited_once()

    async def test_create_connection_from_host_fields(self):
        """Test client construction without network I/O."""
        client = create_redis_connection(
            RedisSettings(REDIS_HOST="cache", REDIS_PORT=6380, REDIS_DB=2, REDIS_MAX_CONNECTIONS=7)
        )
        try:
            kwargs = client.connection_pool.connection_kwargs
            assert kwargs["host"] == "cache"
            assert kwargs["port"] == 6380
            assert kwargs["db"] == 2
            assert client.connection_pool.max_connections == 7
        finally:
            await client.aclose()

    async def test_create_connection_from_url(self):
        """Test that REDIS_URL wins over host fields."""
        client = create_redis_connection(
            RedisSettings(REDIS_URL="redis://:pw@redis.internal:6379/3", REDIS_HOST="ignored")
        )
        try:
            kwargs = client.connection_pool.connection_kwargs
            assert kwargs["host"] == "redis.internal"
            assert kwargs["db"] == 3
            assert kwargs["password"] == "pw"
        finally:
            await client.aclose()
