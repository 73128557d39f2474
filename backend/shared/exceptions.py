"""
Base exception classes for Huddle.

Each module should define its own exceptions that inherit from these bases.
The application root catches HuddleError at the point of the user action
and turns it into a toast, so every failure carries a user-facing message.
"""

from typing import Optional, Any


class HuddleError(Exception):
    """
    Base exception for all Huddle errors.

    All custom exceptions should inherit from this class.
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to a dictionary for logs and toasts."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


class ValidationError(HuddleError):
    """Input rejected locally, before any network call."""

    pass


class NotFoundError(HuddleError):
    """Resource not found."""

    pass


class FetchError(HuddleError):
    """A read from the data store failed."""

    pass


class AuthenticationError(HuddleError):
    """Authentication failed (invalid or missing credentials)."""

    pass


class AuthorizationError(HuddleError):
    """The data store rejected an operation the client believed permitted."""

    pass


class ConflictError(HuddleError):
    """A unique constraint was violated (e.g., duplicate friend request)."""

    pass


class StoreWriteError(HuddleError):
    """A write to the data store failed."""

    pass


class StoreTimeoutError(HuddleError):
    """A data store call did not complete within the configured timeout."""

    def __init__(self, operation: str, timeout: float):
        super().__init__(
            f"Timed out after {timeout:g}s: {operation}",
            code="STORE_TIMEOUT",
            details={"operation": operation, "timeout": timeout},
        )


class TransportError(HuddleError):
    """The realtime push channel dropped or failed to subscribe."""

    pass


class ExternalServiceError(HuddleError):
    """Error communicating with an external service."""

    def __init__(
        self,
        message: str,
        service: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message, code, details)
        self.service = service
        self.details["service"] = service
