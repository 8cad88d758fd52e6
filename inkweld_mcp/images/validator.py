"""Image payload validation by file signature."""

from __future__ import annotations

import base64
import binascii
import re
from dataclasses import dataclass
from typing import Optional, Tuple

MAX_IMAGE_BYTES = 10 * 1024 * 1024

_DATA_URL_RE = re.compile(r"^data:(image/[^;]+);base64,(.+)$", re.S)

EXTENSIONS = {"image/png": "png", "image/jpeg": "jpg", "image/gif": "gif", "image/webp": "webp"}


@dataclass
class ImageValidationResult:
    """Result of image payload validation."""

    valid: bool
    mime_type: Optional[str] = None
    error: Optional[str] = None


def detect_image_type(data: bytes) -> Optional[str]:
    if data.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if data.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if data[:6] in (b"GIF87a", b"GIF89a"):
        return "image/gif"
    if data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return "image/webp"
    return None


def validate_image(data: bytes, max_bytes: int = MAX_IMAGE_BYTES) -> ImageValidationResult:
    if not data:
        return ImageValidationResult(valid=False, error="empty image data")
    if len(data) > max_bytes:
        return ImageValidationResult(
            valid=False, error=f"image is {len(data)} bytes, exceeding {max_bytes}"
        )
    mime_type = detect_image_type(data)
    if mime_type is None:
        return ImageValidationResult(valid=False, error="unsupported image format")
    return ImageValidationResult(valid=True, mime_type=mime_type)


def decode_base64_image(raw: str) -> Tuple[bytes, Optional[str]]:
    """Decode raw base64 or a ``data:image/...;base64,`` URL.

    Returns:
        Tuple of (bytes, declared mime type or None)

    Raises:
        ValueError: If the payload is not valid base64
    """
    value = raw.strip()
    declared = None
    if value.startswith("data:"):
        match = _DATA_URL_RE.match(value)
        if match:
            declared, value = match.group(1), match.group(2)
        elif "," in value:
            value = value.split(",", 1)[1]
    try:
        return base64.b64decode(value, validate=False), declared
    except (binascii.Error, ValueError) as exc:
        raise ValueError(f"invalid base64 data: {exc}") from exc


def extension_for(mime_type: str) -> str:
    return EXTENSIONS.get(mime_type, "png")
