"""Tests for image payload validation."""

import base64

import pytest

from conftest import JPEG_BYTES, PNG_BYTES
from inkweld_mcp.images import decode_base64_image, detect_image_type, extension_for, validate_image

GIF_BYTES = b"GIF89a" + b"\x00" * 16
WEBP_BYTES = b"RIFF\x00\x00\x00\x00WEBPVP8 " + b"\x00" * 16


@pytest.mark.parametrize(
    "data,expected",
    [
        (PNG_BYTES, "image/png"),
        (JPEG_BYTES, "image/jpeg"),
        (GIF_BYTES, "image/gif"),
        (WEBP_BYTES, "image/webp"),
        (b"%PDF-1.7", None),
        (b"", None),
    ],
)
def test_detect_image_type(data, expected):
    assert detect_image_type(data) == expected


class TestValidateImage:
    """Signature and size checks."""

    def test_valid_png(self):
        result = validate_image(PNG_BYTES)
        assert result.valid
        assert result.mime_type == "image/png"
        assert result.error is None

    def test_empty(self):
        assert validate_image(b"").error == "empty image data"

    def test_unknown_format(self):
        result = validate_image(b"<svg></svg>")
        assert not result.valid
        assert result.error == "unsupported image format"

    def test_too_large(self):
        result = validate_image(PNG_BYTES, max_bytes=10)
        assert not result.valid
        assert "exceeding 10" in result.error


class TestDecodeBase64:
    """Raw base64 and data URLs."""

    def test_raw_base64(self):
        data, declared = decode_base64_image(base64.b64encode(PNG_BYTES).decode())
        assert data == PNG_BYTES
        assert declared is None

    def test_data_url(self):
        encoded = "data:image/jpeg;base64," + base64.b64encode(JPEG_BYTES).decode()
        data, declared = decode_base64_image(encoded)
        assert data == JPEG_BYTES
        assert declared == "image/jpeg"

    def test_invalid_padding(self):
        with pytest.raises(ValueError, match="invalid base64"):
            decode_base64_image("abc")


def test_extension_for():
    assert extension_for("image/jpeg") == "jpg"
    assert extension_for("image/webp") == "webp"
    assert extension_for("image/tiff") == "png"
