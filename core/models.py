# core/models.py
from pydantic import BaseModel, Field
from typing import Optional, Literal, Union, Tuple
import mimetypes
import os
import re
import time

# --- Utility Functions ---

OBJECT_KEY_PATTERN = re.compile(r"^(\d+)-(.+)$")

def current_time_millis() -> int:
    return int(time.time() * 1000)

def build_object_key(filename: str, timestamp_ms: Optional[int] = None) -> str:
    """Builds the storage key for an upload: '{timestampMillis}-{originalFileName}'."""
    if timestamp_ms is None:
        timestamp_ms = current_time_millis()
    return f"{timestamp_ms}-{filename}"

def parse_object_key(key: str) -> Tuple[Optional[int], str]:
    """Splits a storage key back into (timestamp_ms, original filename).

    Keys that were not produced by build_object_key come back as (None, key).
    """
    match = OBJECT_KEY_PATTERN.match(key)
    if not match:
        return None, key
    return int(match.group(1)), match.group(2)

# --- Auth State ---

class Unauthenticated(BaseModel):
    """No valid session is held for this visitor."""
    kind: Literal["unauthenticated"] = "unauthenticated"

class Authenticated(BaseModel):
    """A session validated by Supabase Auth."""
    kind: Literal["authenticated"] = "authenticated"
    user_id: str
    access_token: str
    email: Optional[str] = None

AuthState = Union[Unauthenticated, Authenticated]

# --- Gallery ---

class UploadedImage(BaseModel):
    """An image stored in the bucket and shown in the gallery."""
    id: str = Field(..., description="Storage key, '{timestampMillis}-{originalFileName}'")
    url: str = Field(..., description="Public URL of the stored object")
    name: str = Field(..., description="Original filename (not unique)")

    class Config:
        from_attributes = True

class IncomingFile(BaseModel):
    """A file handed over by the drop zone or the file picker."""
    name: str
    content_type: str = ""
    path: Optional[str] = None
    content: Optional[bytes] = None

    @classmethod
    def from_path(cls, path: str, name: Optional[str] = None, content_type: Optional[str] = None) -> "IncomingFile":
        name = name or os.path.basename(path)
        if not content_type:
            content_type = mimetypes.guess_type(name)[0] or ""
        return cls(name=name, content_type=content_type, path=path)

    @property
    def is_image(self) -> bool:
        return self.content_type.startswith("image/")

    def read_bytes(self) -> bytes:
        if self.content is not None:
            return self.content
        if not self.path:
            raise FileNotFoundError(f"No content or path for '{self.name}'")
        with open(self.path, "rb") as f:
            return f.read()

# --- Notifications ---

class Notification(BaseModel):
    """A toast shown to the user after an action."""
    title: str
    description: str = ""
    variant: Literal["default", "destructive"] = "default"

    @property
    def is_error(self) -> bool:
        return self.variant == "destructive"

class StoredObject(BaseModel):
    """Subset of a Supabase Storage listing entry."""
    name: str
    id: Optional[str] = None
    created_at: Optional[str] = None
    metadata: Optional[dict] = None

    @property
    def is_file(self) -> bool:
        # Folders come back without an id; '.emptyFolderPlaceholder' and friends are hidden
        return bool(self.id) and not self.name.startswith(".")
