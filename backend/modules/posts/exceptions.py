"""
Post feed exceptions.
"""

from shared.exceptions import AuthorizationError, NotFoundError, ValidationError


class EmptyPostError(ValidationError):
    """Raised when a post or comment is blank."""

    def __init__(self, what: str = "post"):
        super().__init__(f"Write something before sharing a {what}", code="EMPTY_POST")


class PostTooLongError(ValidationError):
    def __init__(self, length: int, limit: int):
        super().__init__(
            f"Post is too long ({length} > {limit} characters)",
            code="POST_TOO_LONG",
            details={"length": length, "limit": limit},
        )


class PostNotFoundError(NotFoundError):
    """Raised when a post is not in the loaded feed."""

    def __init__(self, post_id: str):
        super().__init__(
            f"Post not found: {post_id}",
            code="POST_NOT_FOUND",
            details={"post_id": post_id},
        )


class PostAccessDeniedError(AuthorizationError):
    """Raised when someone other than the author deletes a post."""

    def __init__(self, post_id: str, user_id: str):
        super().__init__(
            "Only the author can delete this post",
            code="POST_ACCESS_DENIED",
            details={"post_id": post_id, "user_id": user_id},
        )
