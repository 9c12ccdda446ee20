"""
Image API Models

Pydantic models for the invalidation and warmup endpoints. Rendered images
are returned as raw bytes and have no model.
"""

from pydantic import BaseModel, Field

from watermark_service.imaging.models import ProcessRequest

# Identifiers become one segment of a colon-separated cache key
IMAGE_ID_PATTERN = r"^[^:]+$"


class WarmupItem(BaseModel):
    """One rendition to precompute."""

    image_id: str = Field(..., min_length=1, pattern=IMAGE_ID_PATTERN, description="Original image identifier")
    weight: float = Field(..., ge=0, description="Weight in kilograms")
    dimensions: str = Field(..., min_length=1, description="Dimensions, e.g. 30x20x15")

    def to_process_request(self) -> ProcessRequest:
        return ProcessRequest.create(self.image_id, self.weight, self.dimensions)


class WarmupRequest(BaseModel):
    """Batch of renditions to precompute."""

    items: list[WarmupItem] = Field(..., min_length=1, description="Renditions to warm")


class WarmupResponse(BaseModel):
    """Warmup is asynchronous; only the number of dispatched items is known."""

    dispatched: int


class InvalidateResponse(BaseModel):
    """Result of removing every cached rendition of one image."""

    image_id: str
    deleted: int
