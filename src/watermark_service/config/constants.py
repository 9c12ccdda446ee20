"""
System Constants and Enumerations

Single source of truth for cache key layout, provider names, stage
identifiers used in structured logs, and HTTP header names.
"""

from enum import Enum

# ============================================================================
# Stage Identifiers (for structured logging)
# ============================================================================


class Stage(str, Enum):
    """
    Processing stages attached to log entries as ``stage=...``.

    Format: {SEQUENCE}_{DESCRIPTIVE_NAME}. Sequential stages follow the
    cache-aside flow of a single request; alphabetic prefixes mark
    cross-cutting work.
    """

    KEY_BUILD = "1.0_KEY_BUILD"
    CACHE_LOOKUP = "2.0_CACHE_LOOKUP"
    BLOB_FETCH = "3.0_BLOB_FETCH"
    TRANSFORM = "4.0_TRANSFORM"
    CACHE_STORE = "5.0_CACHE_STORE"

    INVALIDATION = "I_INVALIDATION"
    WARMUP = "W_WARMUP"
    BACKGROUND = "B_BACKGROUND_TASK"
    STARTUP = "S_STARTUP"


# ============================================================================
# Providers
# ============================================================================


class CacheProvider(str, Enum):
    """Cache backends selectable through CACHE_PROVIDER."""

    REDIS = "redis"
    LOCAL = "local"


class StorageProvider(str, Enum):
    """Blob sources selectable through STORAGE_PROVIDER."""

    S3 = "s3"
    LOCAL = "local"


# ============================================================================
# Cache Keys
# ============================================================================

CACHE_KEY_PREFIX = "image"
CACHE_KEY_SEPARATOR = ":"

# Local filesystem store file naming
LOCAL_CACHE_PAYLOAD_SUFFIX = ".jpg"
LOCAL_CACHE_INDEX_SUFFIX = ".key"
LOCAL_CACHE_TEMP_PREFIX = ".tmp-"


# ============================================================================
# HTTP
# ============================================================================

HEADER_REQUEST_ID = "X-Request-ID"
HEADER_CACHE_KEY = "X-Cache-Key"

# Browsers and CDNs may keep a watermarked image for a week
CACHE_CONTROL_PUBLIC = "public, max-age=604800"
