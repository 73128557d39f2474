"""
Post repository for database access.

Encapsulates all Supabase queries and data mapping for:
- posts
- likes (post_id, user_id)
- comments
"""

import logging
from collections import defaultdict
from typing import Any

from shared.exceptions import FetchError
from shared.repository import BaseRepository
from .models import Comment, Post

logger = logging.getLogger(__name__)


def map_comment_row(data: dict[str, Any]) -> Comment:
    return Comment(
        id=str(data["id"]),
        post_id=str(data["post_id"]),
        author_id=str(data["author_id"]),
        author_name=data.get("author_name") or "Anonymous",
        content=data.get("content") or "",
        created_at=data["created_at"],
    )


def map_post_row(data: dict[str, Any], likes: list[str], comments: list[Comment]) -> Post:
    return Post(
        id=str(data["id"]),
        author_id=str(data["author_id"]),
        author_name=data.get("author_name") or "Anonymous",
        author_email=data.get("author_email") or "",
        content=data.get("content") or "",
        created_at=data["created_at"],
        likes=likes,
        comments=comments,
    )


class PostRepository(BaseRepository[Post]):
    """
    Repository for the post feed.

    Likes and comments for a page of posts are read with one query each
    rather than one per post.
    """

    async def list_feed(self, limit: int) -> list[Post]:
        query = self._db.table("posts").select("*").order("created_at", desc=True).limit(limit)
        result = await self._run(query, "load posts")
        rows = result.data or []
        if not rows:
            return []
        post_ids = [str(row["id"]) for row in rows]

        likes_query = self._db.table("likes").select("post_id, user_id").in_("post_id", post_ids)
        comments_query = (
            self._db.table("comments")
            .select("*")
            .in_("post_id", post_ids)
            .order("created_at")
        )
        likes_result = await self._run(likes_query, "load likes")
        comments_result = await self._run(comments_query, "load comments")

        likes: dict[str, list[str]] = defaultdict(list)
        for row in likes_result.data or []:
            likes[str(row["post_id"])].append(str(row["user_id"]))

        comments: dict[str, list[Comment]] = defaultdict(list)
        for row in comments_result.data or []:
            try:
                comment = map_comment_row(row)
            except (KeyError, ValueError) as e:
                logger.warning("Skipping unreadable comment row %s: %s", row.get("id"), e)
                continue
            comments[comment.post_id].append(comment)

        posts = []
        for row in rows:
            post_id = str(row["id"])
            try:
                posts.append(map_post_row(row, likes[post_id], comments[post_id]))
            except (KeyError, ValueError) as e:
                logger.warning("Skipping unreadable post row %s: %s", post_id, e)
        return posts

    async def create_post(self, author_id: str, author_name: str, author_email: str, content: str) -> Post:
        data = {
            "author_id": author_id,
            "author_name": author_name,
            "author_email": author_email,
            "content": content,
        }
        query = self._db.table("posts").insert(data)
        result = await self._run(query, "create post", write=True)
        try:
            return map_post_row(result.data[0], [], [])
        except (KeyError, ValueError) as e:
            raise FetchError(
                f"Post was created but could not be read back: {e}",
                details={"operation": "create post"},
            ) from e

    async def delete_post(self, post_id: str, author_id: str) -> int:
        query = self._db.table("posts").delete().eq("id", post_id).eq("author_id", author_id)
        result = await self._run(query, "delete post", write=True)
        return len(result.data or [])

    async def like(self, post_id: str, user_id: str) -> None:
        query = self._db.table("likes").insert({"post_id": post_id, "user_id": user_id})
        await self._run(query, "like post", write=True)

    async def unlike(self, post_id: str, user_id: str) -> None:
        query = self._db.table("likes").delete().eq("post_id", post_id).eq("user_id", user_id)
        await self._run(query, "unlike post", write=True)

    async def add_comment(self, post_id: str, author_id: str, author_name: str, content: str) -> Comment:
        data = {
            "post_id": post_id,
            "author_id": author_id,
            "author_name": author_name,
            "content": content,
        }
        query = self._db.table("comments").insert(data)
        result = await self._run(query, "add comment", write=True)
        try:
            return map_comment_row(result.data[0])
        except (KeyError, ValueError) as e:
            raise FetchError(
                f"Comment was added but could not be read back: {e}",
                details={"operation": "add comment"},
            ) from e
