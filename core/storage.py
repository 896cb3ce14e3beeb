# core/storage.py
"""
Core Storage Utilities.

Thin async wrapper around the Supabase Storage bucket that holds the uploaded
images. The supabase-py storage client is synchronous, so every network call
runs in a worker thread. Library exceptions are translated into StorageError so
callers only need to handle one failure type.
"""
import asyncio
from typing import List, Optional

import httpx
from supabase import Client, StorageException

from core.config import settings, logger as core_logger
from core.models import StoredObject

logger = core_logger.getChild("Storage")


class StorageError(Exception):
    """Raised when the storage backend rejects or fails a request."""

    def __init__(self, message: str, key: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.key = key


def _error_message(e: Exception) -> str:
    # StorageApiError carries the backend's message separately from its repr
    return getattr(e, "message", None) or str(e) or type(e).__name__


class ImageStorage:
    """Upload, resolve, delete and list objects in one bucket."""

    def __init__(self, client: Client, bucket: Optional[str] = None):
        self.client = client
        self.bucket = bucket or settings.IMAGE_BUCKET

    def _bucket(self):
        return self.client.storage.from_(self.bucket)

    async def upload(self, key: str, content: bytes, content_type: str) -> None:
        logger.debug(f"[{key}] Uploading {len(content)} bytes to bucket '{self.bucket}' ({content_type}).")

        def do_upload():
            return self._bucket().upload(
                path=key,
                file=content,
                file_options={"content-type": content_type, "upsert": "false"}
            )

        try:
            await asyncio.to_thread(do_upload)
        except (StorageException, httpx.HTTPError) as e:
            message = _error_message(e)
            logger.warning(f"[{key}] Storage rejected upload: {message}")
            raise StorageError(message, key=key) from e
        logger.info(f"[{key}] Uploaded to bucket '{self.bucket}'.")

    def get_public_url(self, key: str) -> str:
        """Resolves the public URL of an object. Pure string building, no network call."""
        return self._bucket().get_public_url(key)

    async def remove(self, keys: List[str]) -> None:
        logger.debug(f"Removing {len(keys)} object(s) from bucket '{self.bucket}': {keys}")
        try:
            await asyncio.to_thread(lambda: self._bucket().remove(keys))
        except (StorageException, httpx.HTTPError) as e:
            message = _error_message(e)
            logger.warning(f"Storage rejected removal of {keys}: {message}")
            raise StorageError(message, key=keys[0] if len(keys) == 1 else None) from e
        logger.info(f"Removed {keys} from bucket '{self.bucket}'.")

    async def list_objects(self, limit: Optional[int] = None) -> List[StoredObject]:
        """Lists the files at the bucket root, newest first."""
        options = {
            "limit": limit or settings.GALLERY_LIST_LIMIT,
            "offset": 0,
            "sortBy": {"column": "created_at", "order": "desc"},
        }
        try:
            raw_objects = await asyncio.to_thread(lambda: self._bucket().list("", options))
        except (StorageException, httpx.HTTPError) as e:
            message = _error_message(e)
            logger.warning(f"Listing bucket '{self.bucket}' failed: {message}")
            raise StorageError(message) from e

        objects = [StoredObject(**entry) for entry in (raw_objects or [])]
        files = [obj for obj in objects if obj.is_file]
        logger.info(f"Listed {len(files)} file(s) in bucket '{self.bucket}' ({len(objects) - len(files)} skipped).")
        return files
