"""
Post feed module.

Public API:
- PostFeed: newest posts with like, comment, create and delete actions
- IPostStore / PostRepository
- Post, Comment
- Post exceptions: EmptyPostError, PostTooLongError, PostNotFoundError,
  PostAccessDeniedError
"""

from .exceptions import EmptyPostError, PostAccessDeniedError, PostNotFoundError, PostTooLongError
from .interfaces import IPostStore
from .models import Comment, Post
from .repository import PostRepository
from .service import PostFeed

__all__ = [
    "PostFeed",
    "IPostStore",
    "PostRepository",
    "Post",
    "Comment",
    "EmptyPostError",
    "PostTooLongError",
    "PostNotFoundError",
    "PostAccessDeniedError",
]
