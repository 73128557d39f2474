"""
Message Synchronization Engine data models.
"""

from datetime import datetime
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


class MessageKind(str, Enum):
    """What a direct message carries. Persisted alongside the row."""

    TEXT = "text"
    GAME_EVENT = "game_event"  # content is an encoded game payload
    VOICE = "voice"
    IMAGE = "image"


class DirectMessage(BaseModel):
    """
    One direct message between two users.

    Immutable once created except for read_at, which the receiver sets
    exactly once. Optimistic entries carry a temporary id and pending=True
    until the store confirms them.
    """

    id: str = Field(..., description="Message ID (UUID, or temp-* while pending)")
    sender_id: str = Field(..., description="Author")
    receiver_id: str = Field(..., description="Recipient")
    content: str = Field(default="", description="Text, or encoded payload for game events")
    kind: MessageKind = Field(default=MessageKind.TEXT)
    image_url: Optional[str] = Field(None, description="Attached image reference")
    voice_url: Optional[str] = Field(None, description="Attached voice note reference")
    created_at: datetime = Field(..., description="Server time, or client time while pending")
    read_at: Optional[datetime] = Field(None, description="When the receiver read it")
    pending: bool = Field(default=False, description="Optimistic entry awaiting confirmation")

    model_config = {"frozen": True}

    @property
    def sort_key(self) -> tuple[datetime, str]:
        return (self.created_at, self.id)

    @property
    def is_read(self) -> bool:
        return self.read_at is not None

    def is_between(self, first: str, second: str) -> bool:
        """True when the message belongs to the conversation of first and second."""
        return {self.sender_id, self.receiver_id} == {first, second}

    @property
    def preview(self) -> str:
        """Short text for conversation lists."""
        if self.kind == MessageKind.GAME_EVENT:
            return "Game move"
        if self.kind == MessageKind.VOICE:
            return "Voice message"
        if self.content:
            return self.content
        return "Image" if self.image_url else ""


class MessagePayload(BaseModel):
    """
    What the user submits: text and/or an attachment, or a game event.

    Also used as the compose draft.
    """

    text: str = Field(default="", description="Message text")
    image_url: Optional[str] = None
    voice_url: Optional[str] = None
    game_content: Optional[str] = Field(None, description="Encoded game payload")

    @classmethod
    def game_event(cls, content: str) -> "MessagePayload":
        return cls(game_content=content)

    @property
    def kind(self) -> MessageKind:
        if self.game_content is not None:
            return MessageKind.GAME_EVENT
        if self.voice_url:
            return MessageKind.VOICE
        if self.image_url:
            return MessageKind.IMAGE
        return MessageKind.TEXT

    @property
    def content(self) -> str:
        if self.game_content is not None:
            return self.game_content
        return self.text.strip()

    @property
    def is_empty(self) -> bool:
        return not (self.content or self.image_url or self.voice_url)
