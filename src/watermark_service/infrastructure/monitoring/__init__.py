"""Prometheus-backed metrics sink."""

from watermark_service.infrastructure.monitoring.metrics_collector import PrometheusMetricsSink

__all__ = ["PrometheusMetricsSink"]
