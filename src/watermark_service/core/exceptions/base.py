"""
Base Exception Class

Only the root of the service's exception hierarchy lives here, together
with ConfigurationError. Specialized exceptions are in their themed modules.
"""

from typing import Any


class WatermarkServiceError(Exception):
    """
    Base exception for all watermark service errors.

    All custom exceptions inherit from this class to enable:
    - Consistent error handling
    - Request ID correlation
    - Structured error logging

    Attributes:
        message: Error message
        request_id: Request ID for correlation (if available)
        details: Additional error details (dict)

    Example:
        raise BlobNotFoundError(
            "Original image not found",
            details={"image_id": "photo-42", "bucket": "originals"}
        )
    """

    def __init__(
        self, message: str, request_id: str | None = None, details: dict[str, Any] | None = None
    ):
        self.message = message
        self.request_id = request_id
        self.details = (details or {}).copy()
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """
        Convert exception to dictionary for logging/API responses.

        Returns:
            Dict with error_type, message, request_id, and details
        """
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "request_id": self.request_id,
            "details": self.details,
        }

    def with_suggestion(self, suggestion: str) -> "WatermarkServiceError":
        """Add a suggestion to help operators fix the error. Returns self."""
        self.details["suggestion"] = suggestion
        return self

    def __repr__(self) -> str:
        details_str = f", details={self.details}" if self.details else ""
        request_id_str = f", request_id='{self.request_id}'" if self.request_id else ""
        return f"{self.__class__.__name__}(message='{self.message}'{request_id_str}{details_str})"

    @classmethod
    def from_exception(
        cls,
        exc: Exception,
        message: str | None = None,
        request_id: str | None = None,
        **details
    ) -> "WatermarkServiceError":
        """
        Create an error of this class from another exception.

        Useful for wrapping third-party exceptions (redis, botocore, PIL)
        with additional context.

        Example:
            >>> try:
            ...     await redis.get(key)
            ... except RedisError as e:
            ...     raise CacheUnavailableError.from_exception(e, key=key) from e
        """
        error_message = message or str(exc)
        error_details = {
            "original_error": exc.__class__.__name__,
            "original_message": str(exc),
            **details
        }
        return cls(error_message, request_id=request_id, details=error_details)


class ConfigurationError(WatermarkServiceError):
    """Raised when configuration is invalid or missing. Fatal at startup."""
    pass
