"""
Blob Source Factory

Selects origin storage once at startup. Unknown STORAGE_PROVIDER values
and a missing S3 bucket are fatal.
"""

from watermark_service.config.constants import Stage, StorageProvider
from watermark_service.config.settings import Settings
from watermark_service.core.exceptions import ConfigurationError
from watermark_service.core.interfaces.blob_source import BlobSource
from watermark_service.core.logging.logger import get_logger
from watermark_service.infrastructure.storage.local_source import LocalBlobSource
from watermark_service.infrastructure.storage.s3_source import S3BlobSource

logger = get_logger(__name__)


def create_blob_source(settings: Settings) -> BlobSource:
    """
    Build the configured blob source.

    Raises:
        ConfigurationError: Unknown STORAGE_PROVIDER or missing S3_BUCKET
    """
    storage = settings.storage
    provider = storage.STORAGE_PROVIDER

    if provider == StorageProvider.S3.value:
        source = S3BlobSource.from_settings(storage)
        logger.info(
            "Using S3 blob source",
            stage=Stage.STARTUP,
            bucket=storage.S3_BUCKET,
            prefix=storage.S3_PREFIX,
            endpoint=storage.S3_ENDPOINT,
        )
        return source

    if provider == StorageProvider.LOCAL.value:
        logger.info("Using local blob source", stage=Stage.STARTUP, path=storage.LOCAL_STORAGE_PATH)
        return LocalBlobSource(storage.LOCAL_STORAGE_PATH)

    raise ConfigurationError(
        f"Unknown STORAGE_PROVIDER '{provider}'",
        details={"provider": provider, "supported": [p.value for p in StorageProvider]},
    )
