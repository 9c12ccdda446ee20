"""
Image Request Models

Immutable values passed from the HTTP layer (or a warmup batch) into the
orchestrator. Neither is persisted.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class WatermarkParams:
    """
    Transform parameters for one watermarked rendition.

    Field order is the order the cache key serializes them in.

    Attributes:
        weight: Package weight in kilograms, rendered with 2 decimals
        dimensions: Free-form dimension string, e.g. "30x20x15"
    """

    weight: float
    dimensions: str


@dataclass(frozen=True)
class ProcessRequest:
    """One image to process: identifier plus transform parameters."""

    image_id: str
    params: WatermarkParams

    @classmethod
    def create(cls, image_id: str, weight: float, dimensions: str) -> "ProcessRequest":
        """Build a request from flat values."""
        return cls(image_id=image_id, params=WatermarkParams(weight=weight, dimensions=dimensions))
