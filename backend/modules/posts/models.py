"""
Post feed data models.
"""

from datetime import datetime
from pydantic import BaseModel, Field


class Comment(BaseModel):
    """A reply under a post."""

    id: str = Field(..., description="Comment ID (UUID)")
    post_id: str = Field(..., description="Post it belongs to")
    author_id: str = Field(..., description="User who wrote it")
    author_name: str = Field(default="Anonymous")
    content: str
    created_at: datetime

    model_config = {"frozen": True}


class Post(BaseModel):
    """A public post with its likes and comments folded in."""

    id: str = Field(..., description="Post ID (UUID)")
    author_id: str = Field(..., description="User who wrote it")
    author_name: str = Field(default="Anonymous")
    author_email: str = Field(default="")
    content: str
    created_at: datetime
    likes: list[str] = Field(default_factory=list, description="IDs of users who liked it")
    comments: list[Comment] = Field(default_factory=list, description="Oldest first")

    model_config = {"frozen": True}

    @property
    def like_count(self) -> int:
        return len(self.likes)

    def liked_by(self, user_id: str) -> bool:
        return user_id in self.likes

    def owned_by(self, user_id: str) -> bool:
        return self.author_id == user_id
