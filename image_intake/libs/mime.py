"""
Content type sniffing.

The type is derived from the leading bytes of the upload only; whatever the
client declared in the multipart headers is ignored.
"""

from typing import Iterable, List, Optional, Tuple

# Only the first 512 bytes are considered, like browser sniffing
SNIFF_LENGTH = 512

DEFAULT_TYPE = "application/octet-stream"
TEXT_TYPE = "text/plain; charset=utf-8"
HTML_TYPE = "text/html; charset=utf-8"
XML_TYPE = "text/xml; charset=utf-8"

# (signature, offset, mime type)
_SIGNATURES: List[Tuple[bytes, int, str]] = [
    (b"\xff\xd8\xff", 0, "image/jpeg"),
    (b"\x89PNG\r\n\x1a\n", 0, "image/png"),
    (b"GIF87a", 0, "image/gif"),
    (b"GIF89a", 0, "image/gif"),
    (b"BM", 0, "image/bmp"),
    (b"\x00\x00\x01\x00", 0, "image/x-icon"),
    (b"\x00\x00\x02\x00", 0, "image/x-icon"),
    (b"%PDF-", 0, "application/pdf"),
    (b"PK\x03\x04", 0, "application/zip"),
    (b"\x1f\x8b\x08", 0, "application/x-gzip"),
    (b"OggS\x00", 0, "application/ogg"),
]

# Leading tags that mark HTML, matched case-insensitively after whitespace
_HTML_TAGS = (
    b"<!DOCTYPE HTML",
    b"<HTML",
    b"<HEAD",
    b"<SCRIPT",
    b"<IFRAME",
    b"<H1",
    b"<DIV",
    b"<FONT",
    b"<TABLE",
    b"<A",
    b"<STYLE",
    b"<TITLE",
    b"<B",
    b"<BODY",
    b"<BR",
    b"<P",
    b"<!--",
)

# A tag name must end here, so "<Bogus" is not "<B"
_TAG_TERMINATORS = b" >"

_WHITESPACE = b"\t\n\x0c\r "

_TEXT_BOMS = (b"\xef\xbb\xbf", b"\xfe\xff", b"\xff\xfe")

# Control bytes that never occur in plain text
_BINARY_BYTES = frozenset(list(range(0x00, 0x09)) + [0x0B] + list(range(0x0E, 0x1B)) + list(range(0x1C, 0x20)))


def _is_webp(head: bytes) -> bool:
    return len(head) >= 14 and head[:4] == b"RIFF" and head[8:14] == b"WEBPVP"


def _sniff_markup(head: bytes) -> Optional[str]:
    stripped = head.lstrip(_WHITESPACE)
    upper = stripped.upper()
    for tag in _HTML_TAGS:
        if upper.startswith(tag) and len(upper) > len(tag) and upper[len(tag)] in _TAG_TERMINATORS:
            return HTML_TYPE
    if stripped.startswith(b"<?xml"):
        return XML_TYPE
    return None


def _looks_like_text(head: bytes) -> bool:
    if head.startswith(_TEXT_BOMS):
        return True
    return not any(b in _BINARY_BYTES for b in head)


def detect_mime_type(data: bytes) -> str:
    """
    Detect the MIME type of a byte buffer from its signature.

    Args:
        data: Raw file content (only the first 512 bytes are inspected)

    Returns:
        A MIME type string, possibly with parameters (e.g. ``text/plain; charset=utf-8``).
        ``application/octet-stream`` when nothing matches.
    """
    head = data[:SNIFF_LENGTH]

    if _is_webp(head):
        return "image/webp"

    for signature, offset, mime_type in _SIGNATURES:
        if head[offset : offset + len(signature)] == signature:
            return mime_type

    markup = _sniff_markup(head)
    if markup:
        return markup

    if head and _looks_like_text(head):
        return TEXT_TYPE

    return DEFAULT_TYPE


def normalize_mime_type(mime_type: str) -> str:
    """Strip parameters and whitespace from a MIME type."""
    return mime_type.split(";", 1)[0].strip()


def is_allowed_mime_type(mime_type: str, allowed_types: Iterable[str]) -> bool:
    """Check a detected MIME type against the allowed set, ignoring parameters."""
    return normalize_mime_type(mime_type) in set(allowed_types)
