# services/ui_service/app/upload_panel.py
import asyncio
import logging
from typing import Callable, Iterable, List, Optional

from core.models import IncomingFile, UploadedImage, build_object_key, current_time_millis, parse_object_key
from core.storage import StorageError
from .notifications import NotificationCenter

logger = logging.getLogger("Uploadly_Core").getChild("UIService").getChild("UploadPanel")


class UploadPanel(NotificationCenter):
    """
    Gallery state plus the upload/delete actions of the upload page.

    `images` is ordered most recent first. An entry is added only after its
    upload succeeded and removed only after its delete succeeded.
    """

    def __init__(self, storage, clock: Callable[[], int] = current_time_millis):
        super().__init__()
        self.storage = storage
        self.clock = clock
        self.images: List[UploadedImage] = []
        self.is_dragging = False
        self._pending_uploads = 0

    @property
    def uploading(self) -> bool:
        return self._pending_uploads > 0

    # --- Drag state (visual only) ---

    def drag_enter(self) -> None:
        self.is_dragging = True

    drag_over = drag_enter

    def drag_leave(self) -> None:
        self.is_dragging = False

    async def drop(self, files: Iterable[IncomingFile]) -> List[Optional[UploadedImage]]:
        self.is_dragging = False
        return await self.upload_files(files)

    # --- Gallery ---

    async def load_gallery(self) -> List[UploadedImage]:
        """Rebuilds the gallery from the bucket listing."""
        try:
            objects = await self.storage.list_objects()
        except StorageError as e:
            logger.error(f"Loading gallery failed: {e.message}")
            self.notify_error("Could not load images", "There was an error loading your images")
            return self.images
        except Exception as e:
            logger.error(f"Unexpected error loading gallery: {e}", exc_info=True)
            self.notify_error("Could not load images", "There was an error loading your images")
            return self.images

        listed = []
        for obj in objects:
            timestamp, name = parse_object_key(obj.name)
            listed.append((timestamp, UploadedImage(id=obj.name, url=self.storage.get_public_url(obj.name), name=name)))
        # Newest first; keys without a timestamp keep listing order at the end
        listed.sort(key=lambda item: item[0] if item[0] is not None else -1, reverse=True)

        # Uploads that completed while the listing was in flight stay in front
        known_ids = {image.id for image in self.images}
        self.images = self.images + [image for _, image in listed if image.id not in known_ids]
        logger.info(f"Gallery loaded with {len(self.images)} image(s).")
        return self.images

    async def upload_image(self, file: IncomingFile) -> Optional[UploadedImage]:
        if not file.is_image:
            logger.info(f"Rejected '{file.name}': content type '{file.content_type}' is not an image.")
            self.notify_error("Invalid file type", "Please upload an image file")
            return None

        self._pending_uploads += 1
        key = build_object_key(file.name, self.clock())
        try:
            content = await asyncio.to_thread(file.read_bytes)
            await self.storage.upload(key, content, file.content_type)
            image = UploadedImage(id=key, url=self.storage.get_public_url(key), name=file.name)
        except Exception as e:
            logger.error(f"Upload error for '{file.name}' (key '{key}'): {e}", exc_info=True)
            self.notify_error("Upload failed", "There was an error uploading your image")
            return None
        finally:
            self._pending_uploads -= 1

        self.images.insert(0, image)
        self.notify("Upload successful!", "Your image has been uploaded")
        return image

    async def upload_files(self, files: Iterable[IncomingFile]) -> List[Optional[UploadedImage]]:
        """Uploads every file concurrently; completion order is not guaranteed."""
        files = list(files)
        if not files:
            return []
        logger.info(f"Starting {len(files)} upload(s).")
        return list(await asyncio.gather(*(self.upload_image(f) for f in files)))

    async def remove_image(self, image_id: str) -> bool:
        try:
            await self.storage.remove([image_id])
        except Exception as e:
            logger.error(f"Delete error for '{image_id}': {e}", exc_info=True)
            self.notify_error("Delete failed", "There was an error deleting the image")
            return False

        self.images = [image for image in self.images if image.id != image_id]
        self.notify("Image deleted", "Image has been removed")
        return True
