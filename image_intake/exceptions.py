"""
Custom exceptions for the image intake service.
"""

from typing import Any, Dict, Iterable, Optional


class ImageIntakeError(Exception):
    """Base exception for image intake errors."""

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None, status_code: int = 500):
        self.code = code
        self.message = message
        self.details = details or {}
        self.status_code = status_code
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.message, "code": self.code, **self.details}


class MissingFileError(ImageIntakeError):
    """Raised when the multipart form has no image field."""

    def __init__(self, field: str = "image"):
        super().__init__(
            code="MISSING_FILE",
            message="No file uploaded",
            details={"field": field},
            status_code=400,
        )


class FileTooLargeError(ImageIntakeError):
    """Raised when the upload exceeds the configured size limit."""

    def __init__(self, max_size: int):
        super().__init__(
            code="FILE_TOO_LARGE",
            message="File too large",
            details={"max_size": max_size},
            status_code=400,
        )


class UnsupportedTypeError(ImageIntakeError):
    """Raised when the sniffed content type is not an allowed image type."""

    def __init__(self, detected_type: str, allowed_types: Iterable[str]):
        super().__init__(
            code="UNSUPPORTED_TYPE",
            message="Unsupported file type",
            details={"detected_type": detected_type, "allowed_types": list(allowed_types)},
            status_code=400,
        )


class InvalidQualityError(ImageIntakeError):
    """Raised when the quality field is not an integer in 1..100."""

    def __init__(self, value: Any):
        super().__init__(
            code="INVALID_QUALITY",
            message="Quality must be an integer between 1 and 100",
            details={"quality": str(value)},
            status_code=400,
        )


class ProcessingError(ImageIntakeError):
    """Raised when the image cannot be transformed.

    The client only sees a generic message; the cause is kept on the
    exception for logging.
    """

    def __init__(self, reason: str, code: str = "PROCESSING_ERROR"):
        self.reason = reason
        super().__init__(code=code, message="Failed to process image", status_code=500)


class DecodeError(ProcessingError):
    """Raised when the uploaded bytes cannot be decoded as an image."""

    def __init__(self, reason: str):
        super().__init__(reason, code="DECODE_ERROR")


class EncodeError(ProcessingError):
    """Raised when the resized image cannot be encoded as JPEG."""

    def __init__(self, reason: str):
        super().__init__(reason, code="ENCODE_ERROR")


class InternalIOError(ImageIntakeError):
    """Raised when the upload body cannot be read."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(code="INTERNAL_IO_ERROR", message="Failed to read file", status_code=500)


class ClientDisconnectedError(ImageIntakeError):
    """Raised when the client goes away while its image is being processed."""

    def __init__(self, stage: str):
        super().__init__(
            code="CLIENT_DISCONNECTED",
            message="Client closed request",
            details={"stage": stage},
            status_code=499,
        )
