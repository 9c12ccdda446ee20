"""
API Routes

- images: rendition, invalidation and warmup endpoints
- health: liveness and readiness checks
- metrics: Prometheus exposition
"""

from watermark_service.application.api.routes.health import router as health_router
from watermark_service.application.api.routes.images import router as images_router
from watermark_service.application.api.routes.metrics import router as metrics_router

__all__ = ["health_router", "images_router", "metrics_router"]
