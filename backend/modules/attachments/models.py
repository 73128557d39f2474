"""
Attachment data models.
"""

from enum import Enum
from pydantic import BaseModel, Field


class AttachmentKind(str, Enum):
    IMAGE = "image"
    VOICE = "voice"

    @property
    def content_type_prefix(self) -> str:
        return "image/" if self == AttachmentKind.IMAGE else "audio/"


class StoredAttachment(BaseModel):
    """Where an uploaded blob ended up."""

    kind: AttachmentKind
    path: str = Field(..., description="Object path inside the bucket")
    url: str = Field(..., description="Public URL stored on the message")
    content_type: str
    size: int
