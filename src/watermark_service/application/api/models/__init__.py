"""Request and response models."""

from watermark_service.application.api.models.health import HealthResponse
from watermark_service.application.api.models.images import (
    InvalidateResponse,
    WarmupItem,
    WarmupRequest,
    WarmupResponse,
)

__all__ = ["HealthResponse", "InvalidateResponse", "WarmupItem", "WarmupRequest", "WarmupResponse"]
