"""Prometheus exposition endpoint."""

from fastapi import APIRouter, Response

from watermark_service.application.api.dependencies import MetricsDep

router = APIRouter(tags=["Monitoring"])


@router.get("/metrics")
async def prometheus_metrics(metrics: MetricsDep):
    """Metrics of this app instance in Prometheus text format."""
    return Response(content=metrics.render(), media_type=metrics.get_content_type())
