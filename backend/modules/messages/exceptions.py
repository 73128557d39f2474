"""
Message Synchronization Engine exceptions.
"""

from shared.exceptions import ValidationError


class EmptyMessageError(ValidationError):
    """Raised when a message has neither text nor attachment."""

    def __init__(self):
        super().__init__(
            "Write a message or attach something first",
            code="EMPTY_MESSAGE",
        )


class MessageTooLongError(ValidationError):
    """Raised when message text exceeds the compose limit."""

    def __init__(self, length: int, limit: int):
        super().__init__(
            f"Message is too long ({length} > {limit} characters)",
            code="MESSAGE_TOO_LONG",
            details={"length": length, "limit": limit},
        )
