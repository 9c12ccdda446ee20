"""
Exception Module

Structured exception hierarchy for the watermark service.

Module Structure:
-----------------
- **base.py**: WatermarkServiceError base class + ConfigurationError
- **cache.py**: Cache backend exceptions (recoverable)
- **blob.py**: Origin storage exceptions (fatal per request)
- **transform.py**: Watermark transform exceptions (fatal per request)

Usage:
------
```python
from watermark_service.core.exceptions import BlobNotFoundError, CacheUnavailableError
```
"""

from watermark_service.core.exceptions.base import ConfigurationError, WatermarkServiceError
from watermark_service.core.exceptions.blob import (
    BlobError,
    BlobNotFoundError,
    BlobUnavailableError,
)
from watermark_service.core.exceptions.cache import CacheError, CacheUnavailableError
from watermark_service.core.exceptions.transform import ImageDecodeError, TransformError

__all__ = [
    # Base
    "WatermarkServiceError",
    "ConfigurationError",
    # Cache
    "CacheError",
    "CacheUnavailableError",
    # Blob
    "BlobError",
    "BlobNotFoundError",
    "BlobUnavailableError",
    # Transform
    "TransformError",
    "ImageDecodeError",
]
