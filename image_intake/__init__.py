"""
Image intake service: upload, validate, resize and re-encode images as JPEG.
"""

__version__ = "0.1.0"
