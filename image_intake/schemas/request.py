"""
Request schemas for the compress API.
"""

from typing import Optional
from pydantic import BaseModel, Field, ValidationError

from ..exceptions import InvalidQualityError


class UploadRequest(BaseModel):
    """A single upload: the file body and the JPEG quality to encode with."""

    data: bytes = Field(..., repr=False, description="Raw file content")
    quality: int = Field(..., ge=1, le=100, description="JPEG quality")

    @classmethod
    def from_form(cls, data: bytes, raw_quality: Optional[str], default_quality: int) -> "UploadRequest":
        """
        Build a request from multipart form values.

        A missing or blank quality falls back to ``default_quality``.

        Raises:
            InvalidQualityError: If quality is not an integer in 1..100
        """
        if raw_quality is None or not raw_quality.strip():
            quality = default_quality
        else:
            try:
                quality = int(raw_quality.strip())
            except ValueError:
                raise InvalidQualityError(raw_quality)

        try:
            return cls(data=data, quality=quality)
        except ValidationError:
            raise InvalidQualityError(raw_quality if raw_quality is not None else quality)
