"""Image transformers."""

from watermark_service.imaging.processors.watermark import PillowWatermarkTransformer, detect_content_type

__all__ = ["PillowWatermarkTransformer", "detect_content_type"]
