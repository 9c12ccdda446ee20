"""
Image Orchestrator Service

Cache-aside coordinator for watermarked renditions.

THE REQUEST LIFECYCLE:
----------------------

┌──────────────────────────────────────────────────────────────────┐
│ STAGE 1: KEY BUILD                                               │
│ - image:{image_id}:{weight:.2f}:{dimensions}                     │
└──────────────────────────────────────────────────────────────────┘
                             ↓
┌──────────────────────────────────────────────────────────────────┐
│ STAGE 2: CACHE LOOKUP                                            │
│ - Hit: record hit, return payload                                │
│ - Store error or timeout: log, continue as a miss                │
└──────────────────────────────────────────────────────────────────┘
                             ↓
┌──────────────────────────────────────────────────────────────────┐
│ STAGE 3: BLOB FETCH                                              │
│ - Record miss, read the original                                 │
│ - BlobNotFoundError / BlobUnavailableError propagate             │
└──────────────────────────────────────────────────────────────────┘
                             ↓
┌──────────────────────────────────────────────────────────────────┐
│ STAGE 4: TRANSFORM                                               │
│ - Render the watermark, observe duration                         │
│ - TransformError propagates, nothing is cached                   │
└──────────────────────────────────────────────────────────────────┘
                             ↓
┌──────────────────────────────────────────────────────────────────┐
│ STAGE 5: CACHE STORE (background)                                │
│ - Spawned as its own task, not awaited, survives caller cancel   │
│ - Failure is logged and counted, never raised                    │
└──────────────────────────────────────────────────────────────────┘

Only blob and transform failures reach the caller of ``process``. The
cache is advisory: when it is down the service gets slower, not wrong.

CONCURRENCY:
------------
There is no per-key lock. Concurrent identical misses each compute and
each write the same key; the last write wins and every write is a complete
payload. With ``deduplicate_inflight=True`` concurrent misses for the same
key inside this process share one computation instead.

DEPENDENCY INJECTION:
---------------------
Cache store, blob source, transformer, metrics sink and task runner are all
passed in. Nothing here reads global state.
"""

import asyncio
import time
from collections.abc import Sequence

from watermark_service.config.constants import Stage
from watermark_service.core.background import BackgroundTaskRunner
from watermark_service.core.exceptions import CacheError
from watermark_service.core.interfaces.blob_source import BlobSource
from watermark_service.core.interfaces.cache import CacheStore
from watermark_service.core.interfaces.metrics import MetricsSink, NullMetricsSink
from watermark_service.core.interfaces.transformer import Transformer
from watermark_service.core.logging.logger import get_logger, log_stage
from watermark_service.imaging.cache_key import build_cache_key, build_invalidation_pattern
from watermark_service.imaging.models import ProcessRequest, WatermarkParams
from watermark_service.imaging.services.batch_warmer import BatchWarmer

logger = get_logger(__name__)


class ImageOrchestrator:
    """
    Central coordinator for the cache-aside image pipeline.

    Args:
        cache: Cache store selected at startup
        blob_source: Origin storage
        transformer: Watermark renderer
        metrics: Write-only metrics sink (defaults to a no-op sink)
        background: Runner for fire-and-forget work (a private one if omitted)
        cache_timeout: Upper bound for a cache lookup in seconds (None = no bound)
        deduplicate_inflight: Share one computation between concurrent identical misses
        warmup_max_concurrency: Warmup items allowed to run at once (0 = unbounded)

    Usage:
        orchestrator = ImageOrchestrator(cache, blob_source, transformer, metrics=metrics)
        data = await orchestrator.process("photo-42", WatermarkParams(12.5, "30x20x15"))
        removed = await orchestrator.invalidate("photo-42")
    """

    def __init__(
        self,
        cache: CacheStore,
        blob_source: BlobSource,
        transformer: Transformer,
        metrics: MetricsSink | None = None,
        background: BackgroundTaskRunner | None = None,
        cache_timeout: float | None = 2.0,
        deduplicate_inflight: bool = False,
        warmup_max_concurrency: int = 0,
    ):
        self._cache = cache
        self._blob_source = blob_source
        self._transformer = transformer
        self._metrics = metrics or NullMetricsSink()
        self._background = background or BackgroundTaskRunner()
        self._cache_timeout = cache_timeout
        self._deduplicate_inflight = deduplicate_inflight
        self._inflight: dict[str, asyncio.Task] = {}
        self._warmer = BatchWarmer(
            process=self.process,
            runner=self._background,
            max_concurrency=warmup_max_concurrency,
        )

    @property
    def background(self) -> BackgroundTaskRunner:
        return self._background

    # =========================================================================
    # Public API
    # =========================================================================

    async def process(self, image_id: str, params: WatermarkParams) -> bytes:
        """
        Return the watermarked rendition, computing it on a miss.

        Raises:
            BlobNotFoundError: No original for image_id
            BlobUnavailableError: Origin storage failed
            TransformError: Rendering failed (ImageDecodeError for bad input)
        """
        cache_key = build_cache_key(image_id, params)
        log_stage(logger, Stage.KEY_BUILD, "Cache key built", level="debug", cache_key=cache_key)

        cached = await self._lookup(cache_key)
        if cached is not None:
            self._metrics.record_cache_hit()
            log_stage(logger, Stage.CACHE_LOOKUP, "Cache hit", cache_key=cache_key)
            return cached

        self._metrics.record_cache_miss()
        log_stage(logger, Stage.CACHE_LOOKUP, "Cache miss", cache_key=cache_key)

        if self._deduplicate_inflight:
            return await self._compute_single_flight(cache_key, image_id, params)
        return await self._compute_and_store(cache_key, image_id, params)

    async def invalidate(self, image_id: str) -> int:
        """
        Remove every cached rendition of ``image_id``.

        Returns:
            int: Number of entries removed (0 when nothing was cached)

        Raises:
            CacheUnavailableError: The cache could not be scanned or written
        """
        pattern = build_invalidation_pattern(image_id)

        try:
            deleted = await self._cache.delete_by_pattern(pattern)
        except CacheError as e:
            self._metrics.record_cache_error("delete_by_pattern")
            log_stage(
                logger,
                Stage.INVALIDATION,
                "Cache invalidation failed",
                level="error",
                image_id=image_id,
                pattern=pattern,
                error=e.message,
            )
            raise

        log_stage(
            logger,
            Stage.INVALIDATION,
            "Cache invalidated",
            image_id=image_id,
            pattern=pattern,
            deleted=deleted,
        )
        return deleted

    def warmup(self, requests: Sequence[ProcessRequest]) -> None:
        """
        Prime the cache for ``requests`` in the background.

        Returns as soon as the work is scheduled. Failures are logged per item.
        """
        self._warmer.warmup(requests)

    async def drain(self, timeout: float | None = None) -> None:
        """Wait for pending background cache writes and warmup items."""
        await self._background.drain(timeout)

    # =========================================================================
    # Pipeline stages
    # =========================================================================

    async def _lookup(self, cache_key: str) -> bytes | None:
        try:
            if self._cache_timeout is None:
                return await self._cache.get(cache_key)
            return await asyncio.wait_for(self._cache.get(cache_key), timeout=self._cache_timeout)
        except CacheError as e:
            self._metrics.record_cache_error("get")
            log_stage(
                logger,
                Stage.CACHE_LOOKUP,
                "Cache lookup failed, treating as miss",
                level="warning",
                cache_key=cache_key,
                error=e.message,
            )
        except asyncio.TimeoutError:
            self._metrics.record_cache_error("get")
            log_stage(
                logger,
                Stage.CACHE_LOOKUP,
                "Cache lookup timed out, treating as miss",
                level="warning",
                cache_key=cache_key,
                timeout=self._cache_timeout,
            )
        return None

    async def _compute_and_store(self, cache_key: str, image_id: str, params: WatermarkParams) -> bytes:
        log_stage(logger, Stage.BLOB_FETCH, "Fetching original", image_id=image_id)
        original = await self._blob_source.get(image_id)

        start = time.perf_counter()
        result = await self._transformer.transform(original, params)
        duration = time.perf_counter() - start
        self._metrics.observe_compute_duration(duration)

        log_stage(
            logger,
            Stage.TRANSFORM,
            "Watermark applied",
            cache_key=cache_key,
            duration_ms=round(duration * 1000, 2),
            size=len(result),
        )

        self._background.spawn(self._store(cache_key, result), name="cache-set", cache_key=cache_key)
        return result

    async def _store(self, cache_key: str, data: bytes) -> None:
        try:
            await self._cache.set(cache_key, data)
        except CacheError as e:
            self._metrics.record_cache_error("set")
            log_stage(
                logger,
                Stage.CACHE_STORE,
                "Failed to set cache",
                level="error",
                cache_key=cache_key,
                error=e.message,
            )
            return

        log_stage(logger, Stage.CACHE_STORE, "Cached rendition", level="debug", cache_key=cache_key)

    async def _compute_single_flight(self, cache_key: str, image_id: str, params: WatermarkParams) -> bytes:
        task = self._inflight.get(cache_key)

        if task is None:
            task = asyncio.create_task(
                self._compute_and_store(cache_key, image_id, params),
                name=f"compute:{cache_key}",
            )
            self._inflight[cache_key] = task
            task.add_done_callback(lambda finished: self._forget_inflight(cache_key, finished))
        else:
            log_stage(logger, Stage.CACHE_LOOKUP, "Joining in-flight computation", cache_key=cache_key)

        # A cancelled waiter must not cancel the computation other waiters share
        return await asyncio.shield(task)

    def _forget_inflight(self, cache_key: str, task: asyncio.Task) -> None:
        if self._inflight.get(cache_key) is task:
            del self._inflight[cache_key]
        if not task.cancelled():
            # Mark the exception retrieved even when every waiter was cancelled
            task.exception()
