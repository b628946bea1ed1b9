"""
Logging context management using contextvars.

Provides request_id context for tracking logs across the event loop and the
threadpool workers that run image transforms.
"""

import logging
import uuid
from contextvars import ContextVar

# Context variable for request_id (used across async/sync contexts)
request_id_ctx: ContextVar[str] = ContextVar("request_id", default="-")


def new_request_id() -> str:
    """Generate a short id for a single HTTP request."""
    return uuid.uuid4().hex[:12]


def set_request_id(request_id: str) -> None:
    """Set the current request_id for logging context."""
    request_id_ctx.set(request_id)


class RequestIdFilter(logging.Filter):
    """Logging filter that adds request_id to log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_ctx.get()
        return True
