"""
Blob store for group assignment documents
"""
import aiofiles
import aiofiles.os
import logging
import os
from abc import ABC, abstractmethod

from app.config import settings

logger = logging.getLogger(__name__)


class BlobStore(ABC):
    """Durable once ``upload`` returns; ``delete`` is best effort"""

    @abstractmethod
    async def upload(self, key: str, data: bytes, content_type: str) -> str:
        """Store ``data`` under ``key`` and return its public URL"""

    @abstractmethod
    async def delete(self, url: str) -> None:
        """Discard a blob previously returned by ``upload``"""


class LocalBlobStore(BlobStore):
    """Writes blobs to a local directory served under a public URL prefix"""

    def __init__(self, root_dir: str = None, base_url: str = None):
        self.root_dir = root_dir or settings.BLOB_STORAGE_DIR
        self.base_url = (base_url or settings.BLOB_PUBLIC_BASE_URL).rstrip("/")

    def _path_for(self, key: str) -> str:
        # Keys are generated server-side; reject anything that escapes root_dir
        safe_key = os.path.basename(key)
        if not safe_key or safe_key != key:
            raise ValueError(f"Invalid blob key: {key}")
        return os.path.join(self.root_dir, safe_key)

    async def upload(self, key: str, data: bytes, content_type: str) -> str:
        path = self._path_for(key)
        await aiofiles.os.makedirs(self.root_dir, exist_ok=True)

        async with aiofiles.open(path, "xb") as f:
            await f.write(data)

        logger.info(f"Blob stored: {key} ({len(data)} bytes, {content_type})")
        return f"{self.base_url}/{key}"

    async def delete(self, url: str) -> None:
        key = url.rsplit("/", 1)[-1]
        path = self._path_for(key)
        try:
            await aiofiles.os.remove(path)
            logger.info(f"Blob deleted: {key}")
        except FileNotFoundError:
            logger.warning(f"Blob already gone: {key}")


# Global instance
local_blob_store = LocalBlobStore()
