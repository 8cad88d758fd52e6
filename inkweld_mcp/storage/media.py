"""Helpers for ``media://`` references to project files."""

from __future__ import annotations

import mimetypes
import re
from typing import Optional

MEDIA_SCHEME = "media://"
DEFAULT_MIME_TYPE = "application/octet-stream"

_MEDIA_EXTENSIONS = re.compile(r"\.(jpg|jpeg|png|gif|webp|svg|mp3|mp4|wav|ogg|pdf|epub|html|md)$", re.I)
_TEXT_LIKE = {
    "application/json",
    "application/xml",
    "application/javascript",
    "application/x-javascript",
    "application/markdown",
}
_MEDIA_DOCUMENTS = {"application/pdf", "application/epub+zip", "text/html", "text/markdown"}


def media_url(filename: str) -> str:
    return f"{MEDIA_SCHEME}{filename}"


def is_safe_filename(filename: str) -> bool:
    return bool(filename) and "/" not in filename and "\\" not in filename and ".." not in filename


def parse_media_filename(media_url_value: Optional[str], filename: Optional[str] = None) -> Optional[str]:
    """Resolve a ``media://`` URL (preferred) or raw filename to a safe filename.

    Returns None for anything that is not a ``media://`` URL, is empty, or
    could escape the project's storage.
    """
    url = (media_url_value or "").strip()
    name = (filename or "").strip()
    if url:
        if not url.startswith(MEDIA_SCHEME):
            return None
        resolved = url[len(MEDIA_SCHEME) :]
    else:
        resolved = name
    if not is_safe_filename(resolved):
        return None
    return resolved


def guess_mime_type(filename: str) -> Optional[str]:
    if filename.lower().endswith(".md"):
        return "text/markdown"
    mime_type, _ = mimetypes.guess_type(filename)
    return mime_type


def is_text_like_mime(mime_type: str) -> bool:
    return mime_type.startswith("text/") or mime_type in _TEXT_LIKE


def is_media_file(filename: str, mime_type: Optional[str] = None) -> bool:
    if not mime_type:
        return bool(_MEDIA_EXTENSIONS.search(filename))
    return (
        mime_type.startswith("image/")
        or mime_type.startswith("audio/")
        or mime_type.startswith("video/")
        or mime_type in _MEDIA_DOCUMENTS
    )


def strip_extension(filename: str) -> str:
    return re.sub(r"\.[^.]+$", "", filename)
