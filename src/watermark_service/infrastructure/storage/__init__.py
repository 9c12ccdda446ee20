"""Origin image storage adapters."""

from watermark_service.infrastructure.storage.factory import create_blob_source
from watermark_service.infrastructure.storage.local_source import LocalBlobSource
from watermark_service.infrastructure.storage.s3_source import S3BlobSource, create_s3_client

__all__ = ["LocalBlobSource", "S3BlobSource", "create_blob_source", "create_s3_client"]
