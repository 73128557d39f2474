"""
Attachment exceptions.
"""

from shared.exceptions import ExternalServiceError, ValidationError


class UnsupportedAttachmentTypeError(ValidationError):
    def __init__(self, content_type: str, expected_prefix: str):
        super().__init__(
            f"Unsupported file type {content_type!r}; expected {expected_prefix}*",
            code="UNSUPPORTED_ATTACHMENT_TYPE",
            details={"content_type": content_type},
        )


class AttachmentTooLargeError(ValidationError):
    def __init__(self, size: int, limit: int):
        super().__init__(
            f"File is too large ({size} bytes, limit {limit})",
            code="ATTACHMENT_TOO_LARGE",
            details={"size": size, "limit": limit},
        )


class AttachmentUploadError(ExternalServiceError):
    def __init__(self, path: str, reason: str):
        super().__init__(
            f"Failed to upload attachment: {reason}",
            service="storage",
            code="UPLOAD_FAILED",
            details={"path": path},
        )
