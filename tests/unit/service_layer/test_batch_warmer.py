"""
Unit Tests for Batch Warmup

Warmup is fire-and-forget: it returns before any item finishes and each
item fails on its own.
"""

import asyncio

import pytest

from tests.test_fixtures import FakeBlobSource, FakeTransformer, InMemoryCacheStore
from watermark_service.core.background import BackgroundTaskRunner
from watermark_service.imaging.models import ProcessRequest
from watermark_service.imaging.services.batch_warmer import BatchWarmer
from watermark_service.imaging.services.image_orchestrator import ImageOrchestrator


@pytest.mark.unit
class TestOrchestratorWarmup:
    """Test warmup through the orchestrator."""

    async def test_warmup_populates_cache(self, orchestrator, memory_cache):
        """Test that every requested rendition ends up cached."""
        orchestrator.warmup(
            [
                ProcessRequest.create("photo-42", 12.5, "30x20x15"),
                ProcessRequest.create("photo-42", 1, "1x1x1"),
            ]
        )
        await orchestrator.drain()

        assert sorted(memory_cache.keys()) == [
            "image:photo-42:1.00:1x1x1",
            "image:photo-42:12.50:30x20x15",
        ]

    async def test_partial_failure_is_isolated(self):
        """Test that a missing original does not stop the rest of the batch."""
        cache = InMemoryCacheStore()
        orchestrator = ImageOrchestrator(
            cache=cache,
            blob_source=FakeBlobSource({"a": b"a", "c": b"c"}),
            transformer=FakeTransformer(),
        )

        orchestrator.warmup(
            [
                ProcessRequest.create("a", 1, "1x1x1"),
                ProcessRequest.create("b", 1, "1x1x1"),
                ProcessRequest.create("c", 1, "1x1x1"),
            ]
        )
        await orchestrator.drain()

        assert sorted(cache.keys()) == ["image:a:1.00:1x1x1", "image:c:1.00:1x1x1"]

    async def test_warmup_returns_before_work_completes(self):
        """Test that dispatch does not wait for processing."""
        blob_source = FakeBlobSource({"a": b"a"}, delay=0.05)
        cache = InMemoryCacheStore()
        orchestrator = ImageOrchestrator(cache=cache, blob_source=blob_source, transformer=FakeTransformer())

        orchestrator.warmup([ProcessRequest.create("a", 1, "1x1x1")])

        assert cache.keys() == []
        assert orchestrator.background.pending == 1

        await orchestrator.drain()
        assert cache.keys() == ["image:a:1.00:1x1x1"]

    async def test_empty_batch(self, orchestrator):
        """Test that an empty batch dispatches nothing."""
        orchestrator.warmup([])
        assert orchestrator.background.pending == 0

    async def test_already_cached_items_are_hits(self, orchestrator, memory_cache, fake_blob_source, recording_metrics):
        """Test that warmup reuses existing entries."""
        await memory_cache.set("image:photo-42:12.50:30x20x15", b"cached")

        orchestrator.warmup([ProcessRequest.create("photo-42", 12.5, "30x20x15")])
        await orchestrator.drain()

        assert fake_blob_source.calls == []
        assert recording_metrics.hits == 1


@pytest.mark.unit
class TestBatchWarmerConcurrency:
    """Test the optional concurrency cap."""

    async def _run(self, max_concurrency: int, items: int) -> int:
        running = 0
        peak = 0

        async def process(image_id, params):
            nonlocal running, peak
            running += 1
            peak = max(peak, running)
            await asyncio.sleep(0.01)
            running -= 1
            return b""

        runner = BackgroundTaskRunner()
        warmer = BatchWarmer(process, runner, max_concurrency=max_concurrency)
        warmer.warmup([ProcessRequest.create(str(i), 1, "1x1x1") for i in range(items)])
        await runner.drain()
        return peak

    async def test_bounded(self):
        """Test that no more than max_concurrency items run at once."""
        assert await self._run(max_concurrency=2, items=6) == 2

    async def test_unbounded_by_default(self):
        """Test that every item starts immediately without a cap."""
        assert await self._run(max_concurrency=0, items=6) == 6

    async def test_unexpected_errors_stay_in_background(self):
        """Test that non-domain failures are logged by the runner, not raised."""
        runner = BackgroundTaskRunner()

        async def process(image_id, params):
            raise RuntimeError("bug")

        BatchWarmer(process, runner).warmup([ProcessRequest.create("a", 1, "1x1x1")])
        await runner.drain()

        assert runner.pending == 0
