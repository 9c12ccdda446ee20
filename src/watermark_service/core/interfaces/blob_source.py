"""
Blob Source Protocol

Contract for origin storage that supplies the original image bytes.
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class BlobSource(Protocol):
    """
    Supplies raw bytes for an image identifier.

    Implementations:
    - S3BlobSource: S3 and S3-compatible object storage
    - LocalBlobSource: a directory on the local filesystem
    """

    async def get(self, image_id: str) -> bytes:
        """
        Fetch the original image.

        Raises:
            BlobNotFoundError: No original exists for image_id
            BlobUnavailableError: Storage could not be reached
        """
        ...
