from inkweld_mcp.images.base import GeneratedImage, GenerationResult, ImageProvider, ImageRequest
from inkweld_mcp.images.openai_compatible import OpenAICompatibleImageProvider
from inkweld_mcp.images.validator import (
    ImageValidationResult,
    decode_base64_image,
    detect_image_type,
    extension_for,
    validate_image,
)

__all__ = [
    "GeneratedImage",
    "GenerationResult",
    "ImageProvider",
    "ImageRequest",
    "ImageValidationResult",
    "OpenAICompatibleImageProvider",
    "decode_base64_image",
    "detect_image_type",
    "extension_for",
    "validate_image",
]
