"""Glue between multipart uploads and the media vault."""

from __future__ import annotations

from typing import Literal

from fastapi import UploadFile

from .errors import InvalidInput
from .media_vault import MediaVault, StoredMedia, is_image_mime_type, is_video_mime_type, resolve_mime_type


async def save_upload(
    media: MediaVault,
    upload: UploadFile,
    expect: Literal["image", "video"],
) -> StoredMedia:
    """Read an uploaded file and store it, checking it is the expected kind."""
    mime_type = resolve_mime_type(upload.content_type, upload.filename)
    if expect == "image" and not is_image_mime_type(mime_type):
        raise InvalidInput("Invalid image format. Allowed formats: PNG, JPEG, GIF, WebP")
    if expect == "video" and not is_video_mime_type(mime_type):
        raise InvalidInput("Invalid video format. Allowed formats: MP4, WebM, QuickTime")

    file_content = await upload.read()
    return media.save(file_content, mime_type)
