"""
Batch Warmer

Primes the cache for a list of renditions ahead of demand.

``warmup`` spawns one background task per request and returns as soon as
they are scheduled. There is no completion signal and no aggregated error
report: each item succeeds or fails on its own, and a failure is only
visible in the logs. An optional semaphore bounds how many items run at
once; without it every item starts immediately.
"""

import asyncio
from collections.abc import Awaitable, Callable, Sequence

from watermark_service.config.constants import Stage
from watermark_service.core.background import BackgroundTaskRunner
from watermark_service.core.exceptions import WatermarkServiceError
from watermark_service.core.logging.logger import get_logger
from watermark_service.imaging.models import ProcessRequest, WatermarkParams

logger = get_logger(__name__)

ProcessFn = Callable[[str, WatermarkParams], Awaitable[bytes]]


class BatchWarmer:
    """
    Fire-and-forget batch processing.

    Args:
        process: Coroutine function computing (and caching) one rendition
        runner: Task runner that owns the spawned tasks
        max_concurrency: Items allowed to run at once (0 = unbounded)
    """

    def __init__(self, process: ProcessFn, runner: BackgroundTaskRunner, max_concurrency: int = 0):
        self._process = process
        self._runner = runner
        self._max_concurrency = max_concurrency
        self._semaphore = asyncio.Semaphore(max_concurrency) if max_concurrency > 0 else None

    def warmup(self, requests: Sequence[ProcessRequest]) -> None:
        """Dispatch one task per request. Must be called from a running event loop."""
        for request in requests:
            self._runner.spawn(
                self._warm_one(request),
                name="warmup",
                image_id=request.image_id,
            )

        logger.info(
            "Warmup dispatched",
            stage=Stage.WARMUP,
            count=len(requests),
            max_concurrency=self._max_concurrency or None,
        )

    async def _warm_one(self, request: ProcessRequest) -> None:
        try:
            if self._semaphore is None:
                await self._process(request.image_id, request.params)
            else:
                async with self._semaphore:
                    await self._process(request.image_id, request.params)
        except WatermarkServiceError as e:
            logger.error(
                "Warmup item failed",
                stage=Stage.WARMUP,
                image_id=request.image_id,
                weight=request.params.weight,
                dimensions=request.params.dimensions,
                error_type=type(e).__name__,
                error=e.message,
            )
            return

        logger.debug("Warmup item cached", stage=Stage.WARMUP, image_id=request.image_id)
