"""Upload validation and image compression service."""

import base64
import logging
import time
from typing import Awaitable, Callable, Iterable, Optional, Union

from starlette.datastructures import UploadFile
from starlette.concurrency import run_in_threadpool

from ..config import TARGET_WIDTH
from ..exceptions import (
    ClientDisconnectedError,
    FileTooLargeError,
    InternalIOError,
    InvalidQualityError,
    UnsupportedTypeError,
)
from ..libs.image_utils import ProcessedImage, transform_stages
from ..libs.mime import detect_mime_type, is_allowed_mime_type
from ..schemas.request import UploadRequest
from ..schemas.response import CompressResponse

logger = logging.getLogger(__name__)

DisconnectCheck = Callable[[], Awaitable[bool]]


class Timer:
    def __init__(self, name: str):
        self.name = name
        self.start_time = None
        self.elapsed = 0.0

    def __enter__(self):
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, *args):
        self.elapsed = time.perf_counter() - self.start_time
        logger.info(f"[TIMING] {self.name}: {self.elapsed:.3f}s")


class ImageCompressor:
    """
    Validates uploads and turns them into resized JPEGs.

    Holds only read-only configuration, so one instance serves all requests.
    """

    def __init__(
        self,
        max_file_size: int,
        default_quality: int,
        allowed_mime_types: Iterable[str],
        target_width: int = TARGET_WIDTH,
    ):
        self.max_file_size = max_file_size
        self.default_quality = default_quality
        self.allowed_mime_types = tuple(allowed_mime_types)
        self.target_width = target_width
        logger.info(
            f"ImageCompressor initialized with max_file_size={max_file_size}, "
            f"default_quality={default_quality}, target_width={target_width}"
        )

    async def read_upload(self, upload: UploadFile) -> bytes:
        """
        Read the uploaded file, never more than one byte past the limit.

        Raises:
            FileTooLargeError: If the declared or actual size exceeds the limit
            InternalIOError: If the spooled file cannot be read
        """
        if upload.size is not None and upload.size > self.max_file_size:
            logger.info(f"Rejected upload: declared size {upload.size} > {self.max_file_size}")
            raise FileTooLargeError(self.max_file_size)

        try:
            data = await upload.read(self.max_file_size + 1)
        except OSError as e:
            logger.error(f"Failed to read upload: {e}")
            raise InternalIOError(str(e)) from e
        finally:
            await upload.close()

        if len(data) > self.max_file_size:
            logger.info(f"Rejected upload: read more than {self.max_file_size} bytes")
            raise FileTooLargeError(self.max_file_size)
        return data

    def check_type(self, data: bytes) -> str:
        """
        Sniff the content type and check it against the allowed set.

        Raises:
            UnsupportedTypeError: If the detected type is not allowed
        """
        detected = detect_mime_type(data)
        logger.info(f"Detected MIME type: {detected}")

        if not is_allowed_mime_type(detected, self.allowed_mime_types):
            raise UnsupportedTypeError(detected, self.allowed_mime_types)
        return detected

    def build_request(self, data: bytes, raw_quality: Union[str, UploadFile, None]) -> UploadRequest:
        """
        Pair the upload with its JPEG quality.

        Raises:
            InvalidQualityError: If quality was sent as a file or is not an integer in 1..100
        """
        if raw_quality is not None and not isinstance(raw_quality, str):
            raise InvalidQualityError(getattr(raw_quality, "filename", raw_quality))
        return UploadRequest.from_form(data, raw_quality, self.default_quality)

    async def process(self, request: UploadRequest, is_disconnected: Optional[DisconnectCheck] = None) -> ProcessedImage:
        """
        Run decode, resize and encode in the threadpool.

        The client connection is checked between steps; a disconnected client
        aborts the remaining work.
        """

        async def ensure_connected(stage: str):
            if is_disconnected is not None and await is_disconnected():
                logger.info(f"Client disconnected before {stage}, aborting")
                raise ClientDisconnectedError(stage)

        value = request.data
        for stage, step in transform_stages(request.quality, self.target_width):
            await ensure_connected(stage)
            with Timer(stage):
                value = await run_in_threadpool(step, value)

        processed: ProcessedImage = value
        logger.info(
            f"Compressed to {processed.width}x{processed.height} "
            f"q={request.quality}: {len(request.data)} -> {len(processed.data)} bytes"
        )
        return processed

    async def compress(
        self,
        upload: UploadFile,
        raw_quality: Union[str, UploadFile, None] = None,
        is_disconnected: Optional[DisconnectCheck] = None,
    ) -> CompressResponse:
        """Validate an upload (size, type, quality in that order) and compress it."""
        data = await self.read_upload(upload)
        self.check_type(data)
        request = self.build_request(data, raw_quality)
        processed = await self.process(request, is_disconnected)
        return CompressResponse(image=base64.b64encode(processed.data).decode("utf-8"), extension="jpeg")
