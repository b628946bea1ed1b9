"""
Tests for the error taxonomy.
"""

from image_intake.config import ALLOWED_MIME_TYPES
from image_intake.exceptions import (
    ClientDisconnectedError,
    DecodeError,
    EncodeError,
    FileTooLargeError,
    ImageIntakeError,
    InternalIOError,
    InvalidQualityError,
    MissingFileError,
    ProcessingError,
    UnsupportedTypeError,
)


class TestClientErrors:
    """Client-caused errors map to 400."""

    def test_missing_file(self):
        exc = MissingFileError()
        assert exc.status_code == 400
        assert exc.to_dict()["error"] == "No file uploaded"

    def test_file_too_large(self):
        exc = FileTooLargeError(1024)
        assert exc.status_code == 400
        assert exc.to_dict() == {"error": "File too large", "code": "FILE_TOO_LARGE", "max_size": 1024}

    def test_unsupported_type_carries_diagnostics(self):
        """detected_type and allowed_types should be top-level keys."""
        exc = UnsupportedTypeError("text/plain; charset=utf-8", ALLOWED_MIME_TYPES)
        body = exc.to_dict()
        assert exc.status_code == 400
        assert body["error"] == "Unsupported file type"
        assert body["detected_type"] == "text/plain; charset=utf-8"
        assert body["allowed_types"] == list(ALLOWED_MIME_TYPES)

    def test_invalid_quality(self):
        exc = InvalidQualityError("abc")
        assert exc.status_code == 400
        assert exc.code == "INVALID_QUALITY"


class TestServerErrors:
    """Processing errors map to 500 with a generic message."""

    def test_decode_error_hides_reason(self):
        exc = DecodeError("cannot identify image file")
        assert isinstance(exc, ProcessingError)
        assert exc.status_code == 500
        assert exc.to_dict() == {"error": "Failed to process image", "code": "DECODE_ERROR"}
        assert exc.reason == "cannot identify image file"

    def test_encode_error(self):
        exc = EncodeError("encoder error -2")
        assert isinstance(exc, ProcessingError)
        assert exc.code == "ENCODE_ERROR"

    def test_internal_io_error(self):
        exc = InternalIOError("disk gone")
        assert exc.status_code == 500
        assert exc.to_dict()["error"] == "Failed to read file"

    def test_all_share_base(self):
        for exc in (MissingFileError(), ClientDisconnectedError("decode"), InternalIOError("x")):
            assert isinstance(exc, ImageIntakeError)
