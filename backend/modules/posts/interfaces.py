"""
Post store interface.

PostFeed depends on IPostStore rather than on the Supabase repository.
"""

from typing import Protocol, runtime_checkable

from .models import Comment, Post


@runtime_checkable
class IPostStore(Protocol):
    """Durable storage for posts, likes and comments."""

    async def list_feed(self, limit: int) -> list[Post]:
        """Newest posts first, each with its likes and comments."""
        ...

    async def create_post(self, author_id: str, author_name: str, author_email: str, content: str) -> Post:
        ...

    async def delete_post(self, post_id: str, author_id: str) -> int:
        """Delete a post written by author_id. Returns rows deleted."""
        ...

    async def like(self, post_id: str, user_id: str) -> None:
        """
        Record a like.

        Raises:
            ConflictError: If the user already likes the post
        """
        ...

    async def unlike(self, post_id: str, user_id: str) -> None:
        ...

    async def add_comment(self, post_id: str, author_id: str, author_name: str, content: str) -> Comment:
        ...
