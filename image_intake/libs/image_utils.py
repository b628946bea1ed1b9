"""
Image transform functions: decode, resize and re-encode as JPEG.

Everything here is pure and synchronous; callers run it in a worker thread.
"""

import io
import logging
from dataclasses import dataclass
from functools import partial
from typing import Any, Callable, List, Tuple

from PIL import Image

from ..config import TARGET_WIDTH
from ..exceptions import DecodeError, EncodeError, InvalidQualityError

logger = logging.getLogger(__name__)

MIN_QUALITY = 1
MAX_QUALITY = 100

# Modes the JPEG encoder writes directly; everything else goes through RGB
_JPEG_MODES = ("RGB", "L")


@dataclass
class ProcessedImage:
    data: bytes
    width: int
    height: int
    quality: int


def decode_image(data: bytes) -> Image.Image:
    """
    Decode raw bytes into a PIL Image.

    The format is taken from the byte signature. Animated GIF/WEBP input
    yields its first frame.

    Raises:
        DecodeError: If the bytes are not a readable image
    """
    try:
        image = Image.open(io.BytesIO(data))
        image.load()
    except Exception as e:
        raise DecodeError(f"failed to decode image: {e}") from e

    logger.debug(f"Decoded {image.format} image {image.size[0]}x{image.size[1]} mode={image.mode}")
    return image


def target_size(width: int, height: int, target_width: int = TARGET_WIDTH) -> tuple:
    """Compute the output size for a fixed width, keeping the aspect ratio."""
    new_height = max(1, int(target_width * height / width + 0.5))
    return target_width, new_height


def resize_to_width(image: Image.Image, target_width: int = TARGET_WIDTH) -> Image.Image:
    """
    Resize an image to a fixed width with a Lanczos filter.

    Narrower sources are scaled up through the same call so output size only
    depends on the aspect ratio.
    """
    if image.mode not in _JPEG_MODES:
        image = image.convert("RGB")

    size = target_size(image.width, image.height, target_width)
    return image.resize(size, Image.Resampling.LANCZOS)


def validate_quality(quality: int) -> int:
    """Reject JPEG qualities outside 1..100."""
    if isinstance(quality, bool) or not isinstance(quality, int):
        raise InvalidQualityError(quality)
    if not MIN_QUALITY <= quality <= MAX_QUALITY:
        raise InvalidQualityError(quality)
    return quality


def encode_jpeg(image: Image.Image, quality: int) -> bytes:
    """
    Encode a PIL Image as JPEG bytes.

    Raises:
        InvalidQualityError: If quality is outside 1..100
        EncodeError: If the encoder fails
    """
    validate_quality(quality)

    buffer = io.BytesIO()
    try:
        image.save(buffer, format="JPEG", quality=quality)
    except Exception as e:
        raise EncodeError(f"failed to encode image: {e}") from e
    return buffer.getvalue()


def encode_processed(image: Image.Image, quality: int) -> ProcessedImage:
    """Encode a resized image and keep its dimensions alongside the bytes."""
    return ProcessedImage(data=encode_jpeg(image, quality), width=image.width, height=image.height, quality=quality)


def transform_stages(quality: int, target_width: int = TARGET_WIDTH) -> List[Tuple[str, Callable[[Any], Any]]]:
    """
    The named steps of compress_image, in order.

    Each step takes the previous step's output: raw bytes, then a decoded
    image, then the resized image. The last step returns a ProcessedImage.
    """
    validate_quality(quality)
    return [
        ("decode", decode_image),
        ("resize", partial(resize_to_width, target_width=target_width)),
        ("encode", partial(encode_processed, quality=quality)),
    ]


def compress_image(data: bytes, quality: int, target_width: int = TARGET_WIDTH) -> ProcessedImage:
    """
    Decode, resize and re-encode an image as JPEG.

    Args:
        data: Raw image bytes (JPEG, PNG, GIF, WEBP, ...)
        quality: JPEG quality (1-100)
        target_width: Output width in pixels

    Returns:
        ProcessedImage with the JPEG bytes and output dimensions
    """
    value = data
    for _, step in transform_stages(quality, target_width):
        value = step(value)
    return value
