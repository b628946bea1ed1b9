"""
HTTP API routers.
"""

from .compress import router as compress_router

__all__ = ["compress_router"]
