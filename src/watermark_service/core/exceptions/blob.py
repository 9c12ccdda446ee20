"""
Blob Source Exceptions

Errors raised while fetching original images. Both are fatal to the
request that triggered the fetch.
"""

from watermark_service.core.exceptions.base import WatermarkServiceError


class BlobError(WatermarkServiceError):
    """Base exception for origin storage errors."""
    pass


class BlobNotFoundError(BlobError):
    """Raised when no original exists for the requested identifier."""
    pass


class BlobUnavailableError(BlobError):
    """
    Raised when origin storage cannot be reached or fails.

    Common causes:
    - S3 endpoint unreachable or throttling
    - Credentials rejected
    - Local storage directory unreadable
    """
    pass
