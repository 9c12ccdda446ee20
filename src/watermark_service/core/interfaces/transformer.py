"""
Transformer Protocol

Contract for turning original image bytes into a watermarked rendition.
"""

from typing import Protocol, runtime_checkable

from watermark_service.imaging.models import WatermarkParams


@runtime_checkable
class Transformer(Protocol):
    """Takes raw bytes plus parameters and returns transformed bytes."""

    async def transform(self, data: bytes, params: WatermarkParams) -> bytes:
        """
        Render the watermark.

        Raises:
            ImageDecodeError: The input is not a decodable image
            TransformError: Drawing or encoding failed
        """
        ...
