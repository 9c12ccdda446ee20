"""
Local Blob Source

Reads original images from a directory. Intended for development and for
deployments that mount originals from a shared volume.
"""

import asyncio
from pathlib import Path

from watermark_service.config.constants import Stage
from watermark_service.core.exceptions import BlobNotFoundError, BlobUnavailableError
from watermark_service.core.logging.logger import get_logger

logger = get_logger(__name__)


class LocalBlobSource:
    """BlobSource reading ``<root>/<image_id>``."""

    def __init__(self, root: str | Path):
        self._root = Path(root).resolve()

    async def get(self, image_id: str) -> bytes:
        """Read the original image bytes."""
        return await asyncio.to_thread(self._read, image_id)

    def _read(self, image_id: str) -> bytes:
        path = (self._root / image_id).resolve()

        # Identifiers must stay inside the root ("../etc/passwd")
        if self._root not in path.parents:
            raise BlobNotFoundError(
                f"Image '{image_id}' not found in storage",
                details={"image_id": image_id},
            )

        try:
            return path.read_bytes()
        except (FileNotFoundError, IsADirectoryError) as e:
            raise BlobNotFoundError(
                f"Image '{image_id}' not found in storage",
                details={"image_id": image_id, "path": str(path)},
            ) from e
        except OSError as e:
            logger.error("Failed to read original", stage=Stage.BLOB_FETCH, path=str(path), error=str(e))
            raise BlobUnavailableError.from_exception(e, image_id=image_id, path=str(path)) from e
