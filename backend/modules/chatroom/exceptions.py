"""
Chat room exceptions.
"""

from shared.exceptions import ValidationError


class EmptyChatMessageError(ValidationError):
    """Raised when a chat line is blank."""

    def __init__(self):
        super().__init__("Write something first", code="EMPTY_CHAT_MESSAGE")


class ChatMessageTooLongError(ValidationError):
    """Raised when a chat line exceeds the room's limit."""

    def __init__(self, length: int, limit: int):
        super().__init__(
            f"Chat message is too long ({length} > {limit} characters)",
            code="CHAT_MESSAGE_TOO_LONG",
            details={"length": length, "limit": limit},
        )
