"""
Profile Directory data models.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field


class Profile(BaseModel):
    """Public identity of a user: who they are and how they are shown."""

    id: str = Field(..., description="User ID (UUID)")
    username: Optional[str] = Field(None, description="Unique handle / display name")
    avatar_url: Optional[str] = Field(None, description="Avatar image URL")
    created_at: Optional[datetime] = Field(None, description="Creation time")
    updated_at: Optional[datetime] = Field(None, description="Last update time")

    model_config = {"frozen": True}

    @property
    def display_name(self) -> str:
        return self.username or "Unknown User"

    @property
    def initial(self) -> str:
        """Single-letter avatar fallback."""
        return self.username[0].upper() if self.username else "?"


class ProfileUpdate(BaseModel):
    """Fields the owner may change on their own profile."""

    username: Optional[str] = Field(None, max_length=50)
    avatar_url: Optional[str] = None
