"""
FastAPI server entry point.
"""

import logging
import logging.config
import time
from contextlib import asynccontextmanager
from typing import Optional

from dependency_injector import providers
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from starlette.datastructures import Headers
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from . import __version__
from .api import compress_router
from .config import Settings
from .containers import Container
from .exceptions import FileTooLargeError, ImageIntakeError
from .libs.log_context import RequestIdFilter, new_request_id, set_request_id
from .schemas.response import HealthResponse

LOGGING_CONFIG = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "default": {
            "format": "%(asctime)s - %(name)s - %(levelname)s - [%(request_id)s] %(message)s",
        },
    },
    "filters": {
        "request_id_filter": {
            "()": RequestIdFilter,
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "default",
            "filters": ["request_id_filter"],
            "stream": "ext://sys.stdout",
        },
    },
    "root": {
        "level": "INFO",
        "handlers": ["console"],
    },
}

logger = logging.getLogger(__name__)

# Room for multipart boundaries, part headers and the quality field
MULTIPART_OVERHEAD = 64 * 1024

# Preflight responses may be cached for 12 hours
CORS_MAX_AGE = 12 * 60 * 60


def configure_logging(level: str = "INFO") -> None:
    config = dict(LOGGING_CONFIG)
    config["root"] = {**LOGGING_CONFIG["root"], "level": level}
    logging.config.dictConfig(config)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware that tags each request with an id and logs it."""

    async def dispatch(self, request: Request, call_next):
        start_time = time.time()
        method = request.method
        path = request.url.path

        request_id = request.headers.get("x-request-id") or new_request_id()
        set_request_id(request_id)

        content_length = request.headers.get("content-length")
        if content_length:
            logger.info(f">>> {method} {path} | {content_length} bytes")
        else:
            logger.info(f">>> {method} {path}")

        response = await call_next(request)

        duration = time.time() - start_time
        logger.info(f"<<< {method} {path} | {response.status_code} | {duration:.3f}s")
        response.headers["X-Request-ID"] = request_id

        return response


class BodySizeLimitMiddleware:
    """Stop reading request bodies once they cannot fit under the upload limit.

    A declared Content-Length over the limit is refused before any body is
    read. Otherwise body chunks are counted as they arrive, and the first
    chunk past the limit raises FileTooLargeError out of ``receive`` so the
    multipart parser never sees the rest.
    """

    def __init__(self, app: ASGIApp, max_file_size: int):
        self.app = app
        self.max_file_size = max_file_size
        self.max_body_size = max_file_size + MULTIPART_OVERHEAD

    async def __call__(self, scope: Scope, receive: Receive, send: Send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        content_length = Headers(scope=scope).get("content-length")
        if content_length and content_length.isdigit() and int(content_length) > self.max_body_size:
            logger.info(f"Rejected body of {content_length} bytes before reading")
            await self._reject(scope, receive, send)
            return

        received = 0
        response_started = False

        async def limited_receive() -> Message:
            nonlocal received
            message = await receive()
            if message["type"] == "http.request":
                received += len(message.get("body", b""))
                if received > self.max_body_size:
                    logger.info(f"Stopped reading body after {received} bytes")
                    raise FileTooLargeError(self.max_file_size)
            return message

        async def tracking_send(message: Message):
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await self.app(scope, limited_receive, tracking_send)
        except FileTooLargeError:
            if response_started:
                raise
            await self._reject(scope, receive, send)

    async def _reject(self, scope: Scope, receive: Receive, send: Send):
        exc = FileTooLargeError(self.max_file_size)
        response = JSONResponse(status_code=exc.status_code, content=exc.to_dict())
        await response(scope, receive, send)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifespan."""
    container: Container = app.state.container
    settings = container.config()

    # Wire container for dependency injection
    container.wire(
        modules=[
            "image_intake.api.compress",
        ]
    )

    logger.info(f"Starting server on {settings.bind_address}")
    logger.info(f"Max file size: {settings.max_file_size} bytes")
    logger.info(f"Default quality: {settings.default_quality}")
    logger.info(f"Allowed origin: {settings.allow_origin}")

    yield

    logger.info("Shutting down image intake server...")
    container.unwire()
    logger.info("Image intake server shut down")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Settings to use instead of the environment (mainly for tests)
    """
    container = Container()
    if settings is not None:
        container.config.override(providers.Object(settings))
    settings = container.config()

    configure_logging(settings.log_level)

    app = FastAPI(
        title="Image Intake Server",
        description="Resizes uploaded images to 800px wide and returns them as base64 JPEG",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.container = container

    # Inner to outer: size limit, request logging, CORS
    app.add_middleware(BodySizeLimitMiddleware, max_file_size=settings.max_file_size)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.allow_origin],
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["Origin", "Content-Type", "Authorization"],
        expose_headers=["Content-Length"],
        max_age=CORS_MAX_AGE,
    )

    # Register exception handlers
    @app.exception_handler(ImageIntakeError)
    async def image_intake_error_handler(request: Request, exc: ImageIntakeError):
        if exc.status_code >= 500:
            logger.error(f"{exc.code}: {getattr(exc, 'reason', exc.message)}")
        else:
            logger.info(f"Rejected request: {exc.code} {exc.details}")
        return JSONResponse(
            status_code=exc.status_code,
            content=exc.to_dict(),
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
        return JSONResponse(
            status_code=500,
            content={"error": "Internal server error", "code": "INTERNAL_ERROR"},
        )

    # Health check endpoint
    @app.get("/health", response_model=HealthResponse)
    async def health_check():
        return HealthResponse(status="ok")

    # Register API routers
    app.include_router(compress_router)

    return app


# Create app instance
app = create_app()


def main():
    import uvicorn

    settings = app.state.container.config()
    uvicorn.run(
        "image_intake.server:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_config=None,
    )


if __name__ == "__main__":
    main()
