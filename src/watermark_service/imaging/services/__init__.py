"""Orchestration services."""

from watermark_service.imaging.services.batch_warmer import BatchWarmer
from watermark_service.imaging.services.image_orchestrator import ImageOrchestrator

__all__ = ["BatchWarmer", "ImageOrchestrator"]
