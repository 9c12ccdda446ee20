#!/usr/bin/env python3
"""
Metrics Collector with Prometheus Integration

MetricsSink implementation backed by prometheus-client:
- Cache hit / miss counters
- Cache error counter by operation
- Watermark compute duration histogram

Collectors are registered on the CollectorRegistry passed to the
constructor instead of the process-wide default registry, so every test
(or every app instance) can own an isolated set of metrics.
"""

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

from watermark_service.core.logging.logger import get_logger

logger = get_logger(__name__)


class PrometheusMetricsSink:
    """
    Records cache and compute observations as Prometheus metrics.

    Usage:
        registry = CollectorRegistry()
        metrics = PrometheusMetricsSink(registry)
        orchestrator = ImageOrchestrator(..., metrics=metrics)

        body = metrics.render()  # exposition text for /metrics
    """

    def __init__(self, registry: CollectorRegistry | None = None):
        self._registry = registry if registry is not None else CollectorRegistry()

        self._cache_hits = Counter(
            'image_cache_hits_total',
            'The total number of cache hits.',
            registry=self._registry,
        )
        self._cache_misses = Counter(
            'image_cache_misses_total',
            'The total number of cache misses.',
            registry=self._registry,
        )
        self._cache_errors = Counter(
            'image_cache_errors_total',
            'Cache operations that failed and were absorbed.',
            ['operation'],
            registry=self._registry,
        )
        self._compute_duration = Histogram(
            'image_processing_duration_seconds',
            'Duration of image processing.',
            buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
            registry=self._registry,
        )

        logger.debug("Prometheus metrics sink initialized")

    @property
    def registry(self) -> CollectorRegistry:
        return self._registry

    # =========================================================================
    # MetricsSink
    # =========================================================================

    def record_cache_hit(self) -> None:
        """Record cache hit."""
        self._cache_hits.inc()

    def record_cache_miss(self) -> None:
        """Record cache miss."""
        self._cache_misses.inc()

    def record_cache_error(self, operation: str) -> None:
        """Record an absorbed cache failure."""
        self._cache_errors.labels(operation=operation).inc()

    def observe_compute_duration(self, seconds: float) -> None:
        """Observe one transform duration."""
        self._compute_duration.observe(seconds)

    # =========================================================================
    # Export
    # =========================================================================

    def render(self) -> bytes:
        """
        Get Prometheus metrics output.

        Returns:
            bytes: Prometheus text format metrics
        """
        return generate_latest(self._registry)

    def get_content_type(self) -> str:
        """Get Prometheus content type."""
        return CONTENT_TYPE_LATEST
