"""Media storage (videos, thumbnails, avatars, cover images).

Files are stored in a vault directory using a hash-based folder structure
derived from a fresh UUID per upload, and served by the app at /vault.
Raw bytes are stored as uploaded; transcoding is out of scope.
"""

from __future__ import annotations

import hashlib
import logging
import uuid
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import urlparse
from uuid import UUID

from .errors import InvalidInput, MediaStoreError

logger = logging.getLogger(__name__)

PUBLIC_PREFIX = "/vault/"

# Allowed image MIME types
IMAGE_MIME_TYPES: dict[str, str] = {
    "image/png": ".png",
    "image/gif": ".gif",
    "image/webp": ".webp",
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
}

# Allowed video MIME types
VIDEO_MIME_TYPES: dict[str, str] = {
    "video/mp4": ".mp4",
    "video/webm": ".webm",
    "video/quicktime": ".mov",
}


@dataclass(frozen=True)
class StoredMedia:
    url: str
    # Seconds; None for images or when the container was not probed
    duration: float | None = None


def hash_media_id(media_id: UUID) -> str:
    """Hash the media UUID using SHA256 for folder structure derivation."""
    return hashlib.sha256(str(media_id).encode()).hexdigest()


def compute_shard(media_id: UUID) -> str:
    """Return the 'xx/yy/zz' shard for a media id."""
    hash_value = hash_media_id(media_id)
    return f"{hash_value[0:2]}/{hash_value[2:4]}/{hash_value[4:6]}"


_EXTENSION_TO_MIME = {
    "png": "image/png",
    "gif": "image/gif",
    "webp": "image/webp",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "mp4": "video/mp4",
    "webm": "video/webm",
    "mov": "video/quicktime",
}


def resolve_mime_type(content_type: str | None, filename: str | None) -> str:
    """Use the declared content type, falling back to the file extension."""
    mime_type = (content_type or "").lower()
    if mime_type == "image/jpg":
        mime_type = "image/jpeg"
    if mime_type in IMAGE_MIME_TYPES or mime_type in VIDEO_MIME_TYPES:
        return mime_type

    name = filename or ""
    ext = name.lower().rsplit(".", 1)[-1] if "." in name else ""
    return _EXTENSION_TO_MIME.get(ext, mime_type)


def is_video_mime_type(mime_type: str) -> bool:
    return mime_type in VIDEO_MIME_TYPES


def is_image_mime_type(mime_type: str) -> bool:
    return mime_type in IMAGE_MIME_TYPES


def format_duration(seconds: float | None) -> str:
    """Format seconds as m:ss, or h:mm:ss from one hour up."""
    total = int(round(seconds or 0))
    if total < 0:
        total = 0
    hours, remainder = divmod(total, 3600)
    minutes, secs = divmod(remainder, 60)
    if hours:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


class MediaVault:
    """Local vault implementation of the media store."""

    def __init__(self, location: str | Path, size_limit: int) -> None:
        self.location = Path(location)
        self.size_limit = size_limit

    def _extension_for(self, mime_type: str) -> str:
        mime_type_lower = (mime_type or "").lower()
        if mime_type_lower == "image/jpg":
            mime_type_lower = "image/jpeg"
        extension = IMAGE_MIME_TYPES.get(mime_type_lower) or VIDEO_MIME_TYPES.get(mime_type_lower)
        if not extension:
            allowed = list(IMAGE_MIME_TYPES) + list(VIDEO_MIME_TYPES)
            raise InvalidInput(f"MIME type '{mime_type}' is not allowed. Allowed types: {allowed}")
        return extension

    def save(self, file_content: bytes, mime_type: str) -> StoredMedia:
        """
        Store an uploaded file and return its public URL.

        Raises InvalidInput for a disallowed type, an empty or oversized file and
        MediaStoreError when the vault cannot be written.
        """
        extension = self._extension_for(mime_type)

        if not file_content:
            raise InvalidInput("Uploaded file is empty")
        if len(file_content) > self.size_limit:
            max_mb = self.size_limit / (1024 * 1024)
            actual_mb = len(file_content) / (1024 * 1024)
            raise InvalidInput(f"File size ({actual_mb:.2f} MB) exceeds maximum of {max_mb:.0f} MB")

        media_id = uuid.uuid4()
        shard = compute_shard(media_id)
        folder_path = self.location / shard
        file_path = folder_path / f"{media_id}{extension}"
        try:
            folder_path.mkdir(parents=True, exist_ok=True)
            with open(file_path, "wb") as f:
                f.write(file_content)
        except OSError as e:
            logger.error(f"Failed to write media {media_id} to {file_path}: {e}")
            raise MediaStoreError("Unable to store the uploaded file")

        logger.info(f"Saved media {media_id} to {file_path}")
        # TODO: probe video containers (ffprobe) so uploads report a real duration
        return StoredMedia(url=f"{PUBLIC_PREFIX}{shard}/{media_id}{extension}")

    def delete(self, url: str | None) -> bool:
        """
        Best-effort delete of a file referenced by its public URL.

        Only URLs matching /vault/<xx>/<yy>/<zz>/<uuid>.<ext> are touched; anything
        else (e.g. default placeholder images hosted elsewhere) is skipped.
        Returns True if a file was deleted.
        """
        if not url:
            return False

        path = urlparse(url).path if "://" in url else url
        if not path.startswith(PUBLIC_PREFIX):
            logger.info(f"Not a vault URL, deletion skipped: {url}")
            return False

        try:
            # Path parts: /vault/{c1}/{c2}/{c3}/{filename}
            parts = path.split("/")
            if len(parts) != 6:
                return False

            c1, c2, c3, filename = parts[2], parts[3], parts[4], parts[5]
            if "." not in filename:
                return False

            uuid_str, ext = filename.rsplit(".", 1)
            media_id = UUID(uuid_str)
            if compute_shard(media_id) != f"{c1}/{c2}/{c3}":
                return False

            vault_file = self.location / c1 / c2 / c3 / f"{media_id}.{ext}"
            if vault_file.exists():
                vault_file.unlink()
                return True
            return False
        except (ValueError, OSError) as e:
            logger.warning(f"Failed to delete media for url={url}: {e}")
            return False
