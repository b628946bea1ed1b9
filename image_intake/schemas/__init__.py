"""
Pydantic schemas for request/response models.
"""

from .request import UploadRequest
from .response import CompressResponse, ErrorResponse, HealthResponse

__all__ = [
    # Request
    "UploadRequest",
    # Response
    "CompressResponse",
    "ErrorResponse",
    "HealthResponse",
]
