"""
Service layer for the image intake server.
"""

from .compressor import ImageCompressor

__all__ = ["ImageCompressor"]
