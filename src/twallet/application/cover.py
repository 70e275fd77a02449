"""Cover image handling for card templates."""

from __future__ import annotations

import base64
import logging
from typing import Optional

logger = logging.getLogger(__name__)

# Leading-byte signatures, checked in order.
_SIGNATURES: tuple[tuple[bytes, str], ...] = (
    (b"\xff\xd8\xff", "image/jpeg"),
    (b"\x89PNG\r\n\x1a\n", "image/png"),
    (b"GIF87a", "image/gif"),
    (b"GIF89a", "image/gif"),
    (b"BM", "image/bmp"),
    (b"\x00\x00\x01\x00", "image/x-icon"),
    (b"%PDF-", "application/pdf"),
)

SUPPORTED_COVER_TYPES = frozenset({"image/jpeg", "image/png"})


def detect_content_type(data: bytes) -> str:
    """Sniff the MIME type of ``data`` from its leading bytes."""
    if data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return "image/webp"
    for signature, mime_type in _SIGNATURES:
        if data.startswith(signature):
            return mime_type
    return "application/octet-stream"


def encode_cover(cover: Optional[bytes]) -> Optional[str]:
    """Return the ``data:`` URI for a cover image, or None when it can't be used.

    Unsupported image types are not an error: the cover is dropped and the
    detected type is logged.
    """
    if cover is None:
        return None
    mime_type = detect_content_type(cover)
    if mime_type not in SUPPORTED_COVER_TYPES:
        logger.warning(
            "Omitting cover image with unsupported type %s",
            mime_type,
            extra={"detected_mime_type": mime_type},
        )
        return None
    encoded = base64.b64encode(cover).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"
