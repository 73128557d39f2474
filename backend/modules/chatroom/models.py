"""
Chat room data models.
"""

from datetime import datetime
from pydantic import BaseModel, Field


class ChatMessage(BaseModel):
    """One line in the shared room, visible to every signed-in user."""

    id: str = Field(..., description="Message ID (UUID)")
    author_id: str = Field(..., description="User who wrote it")
    author_name: str = Field(default="Anonymous", description="Name shown next to the message")
    content: str = Field(..., description="Message text")
    created_at: datetime = Field(..., description="Server time")

    model_config = {"frozen": True}

    @property
    def sort_key(self) -> tuple[datetime, str]:
        return (self.created_at, self.id)
