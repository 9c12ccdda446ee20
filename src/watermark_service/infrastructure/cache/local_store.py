"""
Local Filesystem Cache Store

Filesystem cache backend with mtime-based TTL.

Layout under the cache root, per entry::

    <sha1(key)>.jpg   payload; its mtime is the insertion time
    <sha1(key)>.key   sidecar holding the logical key, used by delete_by_pattern

Expiry is lazy: ``get`` on an entry older than the TTL reports a miss and
removes the files. Writes go through a temporary file and ``os.replace``,
so a reader sees either the old payload or the new one, never a partial
file, and the mtime is always the time of the latest ``set``.

Entries written without a sidecar (for example by an older deployment)
cannot be matched by ``delete_by_pattern``. They still expire by TTL.

Blocking filesystem calls run in worker threads via ``asyncio.to_thread``.
"""

import asyncio
import fnmatch
import hashlib
import os
import tempfile
import time
from pathlib import Path

from watermark_service.config.constants import (
    LOCAL_CACHE_INDEX_SUFFIX,
    LOCAL_CACHE_PAYLOAD_SUFFIX,
    LOCAL_CACHE_TEMP_PREFIX,
    Stage,
)
from watermark_service.core.exceptions import CacheUnavailableError, ConfigurationError
from watermark_service.core.logging.logger import get_logger

logger = get_logger(__name__)


class LocalFileCacheStore:
    """
    CacheStore backed by a local directory.

    Args:
        path: Cache root; created if missing
        ttl: Entry TTL in seconds

    Raises:
        ConfigurationError: If the cache root cannot be created
    """

    def __init__(self, path: str | Path, ttl: float):
        self._root = Path(path)
        self._ttl = ttl

        try:
            self._root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ConfigurationError.from_exception(
                e, message=f"Cannot create cache directory {self._root}: {e}", path=str(self._root)
            ) from e

    @property
    def root(self) -> Path:
        return self._root

    def payload_path(self, key: str) -> Path:
        """Filesystem-safe, fixed-length payload path for ``key``."""
        return self._root / f"{self._digest(key)}{LOCAL_CACHE_PAYLOAD_SUFFIX}"

    def _index_path(self, key: str) -> Path:
        return self._root / f"{self._digest(key)}{LOCAL_CACHE_INDEX_SUFFIX}"

    @staticmethod
    def _digest(key: str) -> str:
        return hashlib.sha1(key.encode("utf-8")).hexdigest()

    # =========================================================================
    # CacheStore API
    # =========================================================================

    async def get(self, key: str) -> bytes | None:
        """Get a payload; None on miss or expiry."""
        return await asyncio.to_thread(self._read, key)

    async def set(self, key: str, data: bytes) -> None:
        """Store a payload; its mtime starts the TTL."""
        await asyncio.to_thread(self._write, key, data)

    async def delete(self, key: str) -> None:
        """Delete one entry and its sidecar."""
        await asyncio.to_thread(self._remove, key)

    async def delete_by_pattern(self, pattern: str) -> int:
        """
        Delete every entry whose logical key matches ``pattern``.

        Uses the same glob rules as Redis MATCH for ``*``, ``?`` and ``[...]``.

        Returns:
            int: Number of payload files removed
        """
        return await asyncio.to_thread(self._remove_matching, pattern)

    async def ping(self) -> bool:
        """The cache root exists and is writable."""
        return self._root.is_dir() and os.access(self._root, os.W_OK)

    async def close(self) -> None:
        """Nothing to release."""
        return None

    # =========================================================================
    # Blocking helpers (run in worker threads)
    # =========================================================================

    def _read(self, key: str) -> bytes | None:
        path = self.payload_path(key)

        try:
            info = path.stat()
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.error("Failed to stat cache file", stage=Stage.CACHE_LOOKUP, path=str(path), error=str(e))
            raise CacheUnavailableError.from_exception(e, key=key, path=str(path)) from e

        age = time.time() - info.st_mtime
        if age > self._ttl:
            logger.info("Cache item expired, removing", stage=Stage.CACHE_LOOKUP, path=str(path), age=round(age, 1))
            self._remove_stale(path, self._index_path(key))
            return None

        try:
            data = path.read_bytes()
        except FileNotFoundError:
            # Removed between stat and read
            return None
        except OSError as e:
            logger.error("Failed to read cache file", stage=Stage.CACHE_LOOKUP, path=str(path), error=str(e))
            raise CacheUnavailableError.from_exception(e, key=key, path=str(path)) from e

        logger.debug("Cache hit", stage=Stage.CACHE_LOOKUP, path=str(path))
        return data

    def _remove_stale(self, payload: Path, index: Path) -> None:
        for path in (payload, index):
            try:
                path.unlink(missing_ok=True)
            except OSError as e:
                logger.warning("Failed to remove stale cache file", path=str(path), error=str(e))

    def _write(self, key: str, data: bytes) -> None:
        path = self.payload_path(key)

        try:
            self._atomic_write(path, data)
            self._atomic_write(self._index_path(key), key.encode("utf-8"))
        except OSError as e:
            logger.error("Failed to write cache file", stage=Stage.CACHE_STORE, path=str(path), error=str(e))
            raise CacheUnavailableError.from_exception(e, key=key, path=str(path)) from e

        logger.debug("Cache item stored", stage=Stage.CACHE_STORE, path=str(path), size=len(data))

    def _atomic_write(self, target: Path, data: bytes) -> None:
        fd, tmp_name = tempfile.mkstemp(dir=self._root, prefix=LOCAL_CACHE_TEMP_PREFIX)
        try:
            with os.fdopen(fd, "wb") as tmp:
                tmp.write(data)
            os.replace(tmp_name, target)
        except OSError:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def _remove(self, key: str) -> bool:
        payload = self.payload_path(key)

        try:
            existed = payload.exists()
            payload.unlink(missing_ok=True)
            self._index_path(key).unlink(missing_ok=True)
        except OSError as e:
            logger.error("Failed to delete cache file", stage=Stage.INVALIDATION, path=str(payload), error=str(e))
            raise CacheUnavailableError.from_exception(e, key=key, path=str(payload)) from e

        return existed

    def _remove_matching(self, pattern: str) -> int:
        try:
            index_files = list(self._root.glob(f"*{LOCAL_CACHE_INDEX_SUFFIX}"))
        except OSError as e:
            logger.error("Failed to list cache directory", stage=Stage.INVALIDATION, error=str(e))
            raise CacheUnavailableError.from_exception(e, pattern=pattern, path=str(self._root)) from e

        deleted = 0
        for index_file in index_files:
            try:
                key = index_file.read_text(encoding="utf-8")
            except FileNotFoundError:
                continue
            except (OSError, UnicodeDecodeError) as e:
                logger.warning("Skipping unreadable cache index", path=str(index_file), error=str(e))
                continue

            if fnmatch.fnmatchcase(key, pattern) and self._remove(key):
                deleted += 1

        logger.info("Deleted keys by pattern", stage=Stage.INVALIDATION, pattern=pattern, deleted=deleted)
        return deleted
