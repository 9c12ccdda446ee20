"""
Interfaces Module

Protocols the orchestrator depends on. Concrete implementations live in
``watermark_service.infrastructure`` and ``watermark_service.imaging.processors``.
"""

from watermark_service.core.interfaces.blob_source import BlobSource
from watermark_service.core.interfaces.cache import CacheStore
from watermark_service.core.interfaces.metrics import MetricsSink, NullMetricsSink
from watermark_service.core.interfaces.transformer import Transformer

__all__ = [
    "BlobSource",
    "CacheStore",
    "MetricsSink",
    "NullMetricsSink",
    "Transformer",
]
