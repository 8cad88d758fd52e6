"""Image generation provider interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class ImageRequest:
    prompt: str
    model: str
    size: str = "1024x1024"
    options: Dict[str, Any] = field(default_factory=dict)


@dataclass
class GeneratedImage:
    data: bytes
    mime_type: str = "image/png"
    revised_prompt: Optional[str] = None


@dataclass
class GenerationResult:
    provider: str
    model: str
    images: List[GeneratedImage] = field(default_factory=list)


class ImageProvider(ABC):
    """Abstract image generation provider"""

    name: str = "unknown"

    @abstractmethod
    async def is_available(self) -> bool:
        """True when the provider is configured and may be called."""
        pass

    @abstractmethod
    async def generate(self, request: ImageRequest) -> GenerationResult:
        """
        Generate images for a prompt

        Args:
            request: Prompt, model, size and provider options

        Returns:
            Generation result with zero or more images

        Raises:
            ImageGenerationError: If the provider rejects the request or fails
        """
        pass
