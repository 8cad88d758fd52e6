"""Image provider for OpenAI-compatible ``/images/generations`` endpoints."""

from __future__ import annotations

import base64
import binascii
from typing import Any, Dict, Optional

import httpx

from inkweld_mcp.exceptions import ImageGenerationError
from inkweld_mcp.images.base import GeneratedImage, GenerationResult, ImageProvider, ImageRequest
from inkweld_mcp.images.validator import detect_image_type
from inkweld_mcp.logger import Logger, session_logger

DEFAULT_TIMEOUT_SECONDS = 120.0


class OpenAICompatibleImageProvider(ImageProvider):
    name = "openai-compatible"

    def __init__(
        self,
        base_url: Optional[str],
        api_key: Optional[str],
        client: Optional[httpx.AsyncClient] = None,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        logger: Optional[Logger] = None,
    ):
        self.base_url = (base_url or "").rstrip("/")
        self.api_key = api_key
        self.client = client or httpx.AsyncClient(timeout=timeout_seconds)
        self.logger: Logger = logger or session_logger

    async def is_available(self) -> bool:
        return bool(self.base_url and self.api_key)

    async def generate(self, request: ImageRequest) -> GenerationResult:
        if not await self.is_available():
            raise ImageGenerationError("Image provider is not configured")

        payload: Dict[str, Any] = {
            **request.options,
            "model": request.model,
            "prompt": request.prompt,
            "size": request.size,
            "n": 1,
            "response_format": "b64_json",
        }
        self.logger.info("Requesting image generation", model=request.model, size=request.size)
        try:
            response = await self.client.post(
                f"{self.base_url}/images/generations",
                json=payload,
                headers={"Authorization": f"Bearer {self.api_key}"},
            )
        except httpx.HTTPError as exc:
            self.logger.error("Image provider unreachable", error=str(exc))
            raise ImageGenerationError(f"Image provider request failed: {exc}") from exc

        if response.status_code != 200:
            self.logger.error(
                "Image provider error", status_code=response.status_code, body=response.text[:300]
            )
            raise ImageGenerationError(
                f"Image provider returned HTTP {response.status_code}",
                details={"status_code": response.status_code},
            )

        try:
            body = response.json()
        except ValueError as exc:
            raise ImageGenerationError("Image provider returned invalid JSON") from exc

        result = GenerationResult(provider=self.name, model=request.model)
        for item in body.get("data") or []:
            encoded = item.get("b64_json")
            if not encoded:
                continue
            try:
                data = base64.b64decode(encoded)
            except (binascii.Error, ValueError) as exc:
                raise ImageGenerationError("Image provider returned invalid base64 data") from exc
            result.images.append(
                GeneratedImage(
                    data=data,
                    mime_type=detect_image_type(data) or "image/png",
                    revised_prompt=item.get("revised_prompt"),
                )
            )
        self.logger.info("Image generation completed", model=request.model, images=len(result.images))
        return result
