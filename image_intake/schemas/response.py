"""
Response schemas for the image intake API.
"""

from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field


class CompressResponse(BaseModel):
    """Response for POST /compress."""

    image: str = Field(..., description="Base64 encoded JPEG")
    extension: str = Field(default="jpeg", description="Output file extension")


class HealthResponse(BaseModel):
    """Response for GET /health."""

    status: str = Field(default="ok")


class ErrorResponse(BaseModel):
    """Error response format. Extra diagnostic keys depend on the error code."""

    model_config = ConfigDict(
        extra="allow",
        json_schema_extra={
            "example": {
                "error": "Unsupported file type",
                "code": "UNSUPPORTED_TYPE",
                "detected_type": "text/plain; charset=utf-8",
                "allowed_types": ["image/jpeg", "image/png", "image/jpg", "image/webp", "image/gif"],
            }
        },
    )

    error: str = Field(..., description="Human readable error message")
    code: str = Field(..., description="Machine readable error code")
    detected_type: Optional[str] = Field(default=None, description="Sniffed content type (UNSUPPORTED_TYPE only)")
    allowed_types: Optional[List[str]] = Field(default=None, description="Accepted content types (UNSUPPORTED_TYPE only)")
