"""
Metrics Sink Protocol

Write-only observability channel injected into the orchestrator. The
orchestrator never reads metric values back.
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class MetricsSink(Protocol):
    """
    Receives cache and compute observations.

    Implementations:
    - PrometheusMetricsSink: prometheus-client collectors on an injected registry
    - NullMetricsSink: discards everything
    """

    def record_cache_hit(self) -> None:
        """Record a cache hit."""
        ...

    def record_cache_miss(self) -> None:
        """Record a cache miss (including a lookup that failed)."""
        ...

    def record_cache_error(self, operation: str) -> None:
        """Record a failed cache operation (get, set, delete_by_pattern)."""
        ...

    def observe_compute_duration(self, seconds: float) -> None:
        """Observe how long one transform took."""
        ...


class NullMetricsSink:
    """MetricsSink that discards every observation."""

    def record_cache_hit(self) -> None:
        pass

    def record_cache_miss(self) -> None:
        pass

    def record_cache_error(self, operation: str) -> None:
        pass

    def observe_compute_duration(self, seconds: float) -> None:
        pass
