"""
Attachments module.

Public API:
- AttachmentService: validated image / voice uploads returning public URLs
"""

from .models import AttachmentKind, StoredAttachment
from .service import AttachmentService, object_path
from .exceptions import (
    AttachmentTooLargeError,
    AttachmentUploadError,
    UnsupportedAttachmentTypeError,
)

__all__ = [
    "AttachmentService",
    "AttachmentKind",
    "StoredAttachment",
    "object_path",
    "AttachmentTooLargeError",
    "AttachmentUploadError",
    "UnsupportedAttachmentTypeError",
]
