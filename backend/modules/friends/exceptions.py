"""
Friendship Graph exceptions.
"""

from shared.exceptions import (
    ValidationError,
    ConflictError,
    NotFoundError,
    AuthorizationError,
)


class SelfFriendRequestError(ValidationError):
    """Raised when a user tries to befriend themselves."""

    def __init__(self, user_id: str):
        super().__init__(
            "You cannot send a friend request to yourself",
            code="SELF_FRIEND_REQUEST",
            details={"user_id": user_id},
        )


class AlreadyFriendsError(ValidationError):
    """Raised when a request targets someone who is already a friend."""

    def __init__(self, user_id: str, friend_id: str):
        super().__init__(
            "You are already friends",
            code="ALREADY_FRIENDS",
            details={"user_id": user_id, "friend_id": friend_id},
        )


class DuplicateFriendRequestError(ConflictError):
    """Raised when a request to the same receiver already exists."""

    def __init__(self, sender_id: str, receiver_id: str):
        super().__init__(
            "Friend request already sent",
            code="DUPLICATE_FRIEND_REQUEST",
            details={"sender_id": sender_id, "receiver_id": receiver_id},
        )


class FriendRequestNotFoundError(NotFoundError):
    """Raised when a friend request does not exist."""

    def __init__(self, request_id: str):
        super().__init__(
            f"Friend request not found: {request_id}",
            code="FRIEND_REQUEST_NOT_FOUND",
            details={"request_id": request_id},
        )


class FriendRequestAccessDeniedError(AuthorizationError):
    """Raised when someone other than the receiver answers a request."""

    def __init__(self, request_id: str, user_id: str):
        super().__init__(
            "Only the receiver can answer this friend request",
            code="FRIEND_REQUEST_ACCESS_DENIED",
            details={"request_id": request_id, "user_id": user_id},
        )


class InvalidFriendRequestStatusError(ValidationError):
    """Raised when a response is neither accepted nor rejected."""

    def __init__(self, status: str):
        super().__init__(
            f"Invalid response to friend request: {status}",
            code="INVALID_FRIEND_REQUEST_STATUS",
            details={"status": status},
        )
