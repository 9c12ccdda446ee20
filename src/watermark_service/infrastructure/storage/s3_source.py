"""
S3 Blob Source

Fetches original images from S3 or an S3-compatible service (Cloudflare R2,
MinIO) with boto3.

- Object key is ``S3_PREFIX + image_id``
- boto3 is synchronous; calls run in worker threads via ``asyncio.to_thread``
- ``NoSuchKey`` / 404 maps to BlobNotFoundError and is never retried
- every other client or transport error is retried with exponential
  backoff and jitter (tenacity), then surfaces as BlobUnavailableError
"""

import asyncio
from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential_jitter

from watermark_service.config.constants import Stage
from watermark_service.config.settings import StorageSettings
from watermark_service.core.exceptions import (
    BlobNotFoundError,
    BlobUnavailableError,
    ConfigurationError,
)
from watermark_service.core.logging.logger import get_logger

logger = get_logger(__name__)

_NOT_FOUND_CODES = {"404", "NoSuchKey", "NotFound"}


def create_s3_client(storage_settings: StorageSettings) -> Any:
    """
    Build a boto3 S3 client.

    Endpoint and static credentials are optional; without credentials boto3
    falls back to its default provider chain (env, profile, instance role).
    """
    session = boto3.session.Session()
    client_args = {
        "endpoint_url": storage_settings.S3_ENDPOINT,
        "region_name": storage_settings.AWS_REGION,
        "aws_access_key_id": storage_settings.S3_ACCESS_KEY_ID,
        "aws_secret_access_key": storage_settings.S3_SECRET_ACCESS_KEY,
    }
    return session.client("s3", **{k: v for k, v in client_args.items() if v})


class S3BlobSource:
    """
    BlobSource reading from one bucket.

    Args:
        client: boto3 S3 client
        bucket: Bucket name
        prefix: Object key prefix
        max_attempts: Attempts for transient failures (1 = no retry)
        retry_initial_delay: First backoff delay in seconds
        retry_max_delay: Backoff ceiling in seconds
    """

    def __init__(
        self,
        client: Any,
        bucket: str,
        prefix: str = "",
        max_attempts: int = 3,
        retry_initial_delay: float = 0.1,
        retry_max_delay: float = 2.0,
    ):
        self._client = client
        self._bucket = bucket
        self._prefix = prefix
        self._max_attempts = max(1, max_attempts)
        self._retry_initial_delay = retry_initial_delay
        self._retry_max_delay = retry_max_delay

    @classmethod
    def from_settings(cls, storage_settings: StorageSettings) -> "S3BlobSource":
        """
        Build from settings.

        Raises:
            ConfigurationError: S3_BUCKET is not set
        """
        if not storage_settings.S3_BUCKET:
            raise ConfigurationError(
                "S3_BUCKET environment variable is required",
                details={"provider": "s3"},
            ).with_suggestion("Set S3_BUCKET or use STORAGE_PROVIDER=local")

        return cls(
            client=create_s3_client(storage_settings),
            bucket=storage_settings.S3_BUCKET,
            prefix=storage_settings.S3_PREFIX,
            max_attempts=storage_settings.S3_MAX_ATTEMPTS,
        )

    async def get(self, image_id: str) -> bytes:
        """Fetch the original image bytes."""
        key = f"{self._prefix}{image_id}"

        @retry(
            stop=stop_after_attempt(self._max_attempts),
            wait=wait_exponential_jitter(
                initial=self._retry_initial_delay, max=self._retry_max_delay
            ),
            retry=retry_if_exception_type(BlobUnavailableError),
            reraise=True,
            before_sleep=lambda retry_state: logger.warning(
                "Retrying S3 fetch",
                stage=Stage.BLOB_FETCH,
                attempt=retry_state.attempt_number,
                delay=round(retry_state.idle_for, 3),
                key=key,
            ),
        )
        async def _fetch_with_retry() -> bytes:
            return await self._fetch(image_id, key)

        return await _fetch_with_retry()

    async def _fetch(self, image_id: str, key: str) -> bytes:
        try:
            response = await asyncio.to_thread(self._client.get_object, Bucket=self._bucket, Key=key)
            body = response["Body"]
            return await asyncio.to_thread(body.read)
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "")
            if error_code in _NOT_FOUND_CODES:
                raise BlobNotFoundError(
                    f"Image '{image_id}' not found in storage",
                    details={"image_id": image_id, "bucket": self._bucket, "key": key},
                ) from e
            logger.error("S3 GetObject failed", stage=Stage.BLOB_FETCH, key=key, error_code=error_code)
            raise BlobUnavailableError.from_exception(
                e,
                message=f"Failed to get object from S3: {e}",
                image_id=image_id,
                bucket=self._bucket,
                error_code=error_code,
            ) from e
        except BotoCoreError as e:
            logger.error("S3 transport error", stage=Stage.BLOB_FETCH, key=key, error=str(e))
            raise BlobUnavailableError.from_exception(
                e, message=f"Failed to reach S3: {e}", image_id=image_id, bucket=self._bucket
            ) from e
