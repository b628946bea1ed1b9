"""
Library modules for the image intake service.
"""
# Note: Imports are lazy to keep Pillow out of config-only imports

__all__ = [
    "detect_mime_type",
    "is_allowed_mime_type",
    "compress_image",
    "decode_image",
    "resize_to_width",
    "encode_jpeg",
]
