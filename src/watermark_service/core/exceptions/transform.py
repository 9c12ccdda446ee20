"""
Transform Exceptions

Errors raised by the watermark transformer. Results of a failed transform
are never cached.
"""

from watermark_service.core.exceptions.base import WatermarkServiceError


class TransformError(WatermarkServiceError):
    """Raised when drawing or re-encoding the watermarked image fails."""
    pass


class ImageDecodeError(TransformError):
    """Raised when the original bytes are not a decodable image."""
    pass
