"""
Service Container

Builds every long-lived component once, at startup, from settings:
cache store, blob source, transformer, metrics sink, background task
runner and the orchestrator that ties them together.

Any misconfiguration (unknown provider, missing bucket, unreadable font)
raises ConfigurationError here, before the app accepts traffic.
"""

from dataclasses import dataclass

from prometheus_client import CollectorRegistry

from watermark_service.config.constants import Stage
from watermark_service.config.settings import Settings
from watermark_service.core.background import BackgroundTaskRunner
from watermark_service.core.interfaces.blob_source import BlobSource
from watermark_service.core.interfaces.cache import CacheStore
from watermark_service.core.interfaces.transformer import Transformer
from watermark_service.core.logging.logger import get_logger
from watermark_service.imaging.processors.watermark import PillowWatermarkTransformer
from watermark_service.imaging.services.image_orchestrator import ImageOrchestrator
from watermark_service.infrastructure.cache.factory import create_cache_store
from watermark_service.infrastructure.monitoring.metrics_collector import PrometheusMetricsSink
from watermark_service.infrastructure.storage.factory import create_blob_source

logger = get_logger(__name__)

SHUTDOWN_DRAIN_TIMEOUT = 10.0


@dataclass
class ServiceContainer:
    """Components shared by all requests of one app instance."""

    settings: Settings
    cache: CacheStore
    blob_source: BlobSource
    transformer: Transformer
    metrics: PrometheusMetricsSink
    background: BackgroundTaskRunner
    orchestrator: ImageOrchestrator

    async def close(self) -> None:
        """Drain background work, then release the cache."""
        logger.info(
            "Draining background tasks",
            stage=Stage.BACKGROUND,
            pending=self.background.pending,
        )
        await self.background.drain(timeout=SHUTDOWN_DRAIN_TIMEOUT)
        await self.cache.close()


def build_container(settings: Settings, registry: CollectorRegistry | None = None) -> ServiceContainer:
    """
    Wire the service graph from settings.

    Raises:
        ConfigurationError: Invalid provider, credentials or watermark options
    """
    watermark = settings.watermark
    cache_settings = settings.cache

    transformer = PillowWatermarkTransformer(
        font_path=watermark.FONT_PATH,
        font_size=watermark.FONT_SIZE,
        color=watermark.WATERMARK_COLOR,
        quality=watermark.IMAGE_QUALITY,
    )
    blob_source = create_blob_source(settings)
    cache = create_cache_store(settings)
    metrics = PrometheusMetricsSink(registry)
    background = BackgroundTaskRunner()

    orchestrator = ImageOrchestrator(
        cache=cache,
        blob_source=blob_source,
        transformer=transformer,
        metrics=metrics,
        background=background,
        cache_timeout=cache_settings.CACHE_OPERATION_TIMEOUT,
        deduplicate_inflight=cache_settings.DEDUPLICATE_INFLIGHT,
        warmup_max_concurrency=cache_settings.WARMUP_MAX_CONCURRENCY,
    )

    return ServiceContainer(
        settings=settings,
        cache=cache,
        blob_source=blob_source,
        transformer=transformer,
        metrics=metrics,
        background=background,
        orchestrator=orchestrator,
    )
