"""
Attachment uploads.

Images and voice notes go to blob storage under the uploader's folder;
messages only carry the resulting public URL.
"""

import logging
import mimetypes
import time
from typing import Optional

from supabase import AsyncClient

from shared.config import get_settings
from .models import AttachmentKind, StoredAttachment
from .exceptions import (
    AttachmentTooLargeError,
    AttachmentUploadError,
    UnsupportedAttachmentTypeError,
)

logger = logging.getLogger(__name__)


def object_path(user_id: str, filename: str, content_type: str, now_ms: Optional[int] = None) -> str:
    """{user_id}/{epoch_ms}.{ext}, with the extension from the filename or the type."""
    ext = filename.rsplit(".", 1)[-1].lower() if "." in filename else ""
    if not ext:
        guessed = mimetypes.guess_extension(content_type) or ".bin"
        ext = guessed.lstrip(".")
    stamp = now_ms if now_ms is not None else int(time.time() * 1000)
    return f"{user_id}/{stamp}.{ext}"


class AttachmentService:
    """Validates and uploads attachments to Supabase Storage."""

    def __init__(self, supabase_client: AsyncClient, bucket: Optional[str] = None):
        self._db = supabase_client
        settings = get_settings()
        self._bucket = bucket or settings.storage_bucket
        self._max_bytes = settings.max_attachment_bytes

    async def upload_image(self, user_id: str, filename: str, data: bytes, content_type: str) -> StoredAttachment:
        return await self._upload(AttachmentKind.IMAGE, user_id, filename, data, content_type)

    async def upload_voice(self, user_id: str, filename: str, data: bytes, content_type: str) -> StoredAttachment:
        return await self._upload(AttachmentKind.VOICE, user_id, filename, data, content_type)

    def validate(self, kind: AttachmentKind, data: bytes, content_type: str) -> None:
        """
        Raises:
            UnsupportedAttachmentTypeError: Wrong content type for the kind
            AttachmentTooLargeError: Larger than max_attachment_bytes
        """
        if not content_type.startswith(kind.content_type_prefix):
            raise UnsupportedAttachmentTypeError(content_type, kind.content_type_prefix)
        if len(data) > self._max_bytes:
            raise AttachmentTooLargeError(len(data), self._max_bytes)

    async def _upload(
        self,
        kind: AttachmentKind,
        user_id: str,
        filename: str,
        data: bytes,
        content_type: str,
    ) -> StoredAttachment:
        self.validate(kind, data, content_type)
        path = object_path(user_id, filename, content_type)
        bucket = self._db.storage.from_(self._bucket)
        try:
            await bucket.upload(path, data, {"content-type": content_type})
            url = await bucket.get_public_url(path)
        except Exception as e:
            logger.warning("Upload of %s to %s failed: %s", path, self._bucket, e)
            raise AttachmentUploadError(path, str(e)) from e

        logger.info("Uploaded %s %s (%d bytes)", kind.value, path, len(data))
        return StoredAttachment(kind=kind, path=path, url=url, content_type=content_type, size=len(data))
