"""Image generation and assignment tool handlers.

Assigning an image is always: save the blob, then point the document at it
with a ``media://`` URL (never inline base64), then, for covers, record the
cover in the metadata store and the project meta document.
"""

from __future__ import annotations

import base64
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union

from inkweld_mcp.exceptions import InkweldError
from inkweld_mcp.images import ImageRequest, decode_base64_image, extension_for, validate_image
from inkweld_mcp.logger import Logger, session_logger
from inkweld_mcp.mcp_server.context import McpContext, ProjectGrant
from inkweld_mcp.mcp_server.responses import _error, _image, _success
from inkweld_mcp.mcp_server.tool_types import ToolResponse
from inkweld_mcp.mcp_server.tools.common import get_services, project_documents, reports_errors, resolve_project
from inkweld_mcp.metadata import ImageProfile
from inkweld_mcp.permissions import GENERATE_IMAGES, WRITE_WORLDBUILDING
from inkweld_mcp.storage.media import media_url, parse_media_filename, strip_extension
from inkweld_mcp.validation.tool_models import (
    GenerateElementImageInput,
    GenerateImageInput,
    GenerateProjectCoverInput,
    SetElementImageInput,
    SetProjectCoverInput,
)

logger: Logger = session_logger

COVER_SIZE = "1248x832"
DEFAULT_SIZE = "1024x1024"

NO_PROVIDER_MESSAGE = (
    "Error: No image generation provider is available. Please configure an AI image provider."
)


@dataclass
class AcquiredImage:
    data: bytes
    mime_type: str
    generation: Dict[str, Any] = field(default_factory=dict)


ImageOrError = Union[AcquiredImage, ToolResponse]


def _timestamp() -> int:
    return int(time.time() * 1000)


def _kb(data: bytes) -> int:
    return round(len(data) / 1024)


def _require_generate(grant: ProjectGrant, project: str) -> Optional[ToolResponse]:
    if GENERATE_IMAGES not in grant.permissions:
        return _error(f'Error: No "{GENERATE_IMAGES}" permission for project "{project}".')
    return None


async def _resolve_profile(ctx: McpContext, profile_id: Optional[str]) -> Union[ImageProfile, ToolResponse]:
    metadata = get_services(ctx).metadata
    if profile_id:
        profile = await metadata.get_image_profile(profile_id)
        if profile is None:
            return _error(f"Error: Image profile not found: {profile_id}")
        if not profile.enabled:
            return _error(f"Error: Image profile is disabled: {profile_id}")
        return profile
    profiles = await metadata.list_image_profiles(enabled_only=True)
    if not profiles:
        return _error("Error: No enabled image profile found.")
    return profiles[0]


async def generate_image_bytes(
    ctx: McpContext, prompt: str, profile_id: Optional[str], size: Optional[str] = None, cover: bool = False
) -> ImageOrError:
    """Generate one image with the selected (or first enabled) profile.

    Covers are always generated landscape; otherwise ``size`` falls back to the
    profile's default size.
    """
    provider = get_services(ctx).image_provider
    if provider is None or not await provider.is_available():
        return _error(NO_PROVIDER_MESSAGE)

    profile = await _resolve_profile(ctx, profile_id)
    if not isinstance(profile, ImageProfile):
        return profile

    resolved_size = COVER_SIZE if cover else (size or profile.default_size or DEFAULT_SIZE)
    result = await provider.generate(
        ImageRequest(
            prompt=prompt,
            model=profile.model_id,
            size=resolved_size,
            options=dict(profile.options or {}),
        )
    )
    if not result.images:
        return _error("Error: No images were generated")

    image = result.images[0]
    logger.info(
        "Image generated",
        profile_id=profile.id,
        provider=result.provider,
        model=result.model,
        size=resolved_size,
        bytes=len(image.data),
    )
    generation = {
        "profileId": profile.id,
        "provider": result.provider,
        "model": result.model,
    }
    if image.revised_prompt:
        generation["revisedPrompt"] = image.revised_prompt
    return AcquiredImage(image.data, image.mime_type, generation)


async def acquire_supplied_image(
    ctx: McpContext, grant: ProjectGrant, base64_data: Optional[str], media: Optional[str]
) -> ImageOrError:
    """Decode an uploaded image or load an existing project media file."""
    if base64_data and base64_data.strip():
        try:
            data, _declared = decode_base64_image(base64_data)
        except ValueError as exc:
            return _error(f"Error: {exc}")
    elif media and media.strip():
        filename = parse_media_filename(media)
        if filename is None:
            return _error("Error: mediaUrl must look like media://filename.ext")
        data = await get_services(ctx).blob_store.read_project_file(grant.owner, grant.slug, filename)
        if data is None:
            return _error(f"Error: media file not found: {filename}")
    else:
        return _error("Error: provide either base64Data or mediaUrl")

    validation = validate_image(data)
    if not validation.valid:
        return _error(f"Error: Invalid image - {validation.error}")
    return AcquiredImage(data, validation.mime_type or "image/png")


async def apply_element_image(
    ctx: McpContext, grant: ProjectGrant, element_id: str, image: AcquiredImage
) -> ToolResponse:
    extension = "jpg" if image.mime_type == "image/jpeg" else "png"
    filename = f"element-{element_id}.{extension}"
    url = media_url(filename)

    await get_services(ctx).blob_store.save_project_file(
        grant.owner, grant.slug, filename, image.data, image.mime_type
    )
    try:
        await project_documents(ctx, grant).update_worldbuilding(element_id, {"image": url}, "identity")
    except InkweldError as exc:
        logger.error(
            "Element image saved but document update failed",
            project=grant.key,
            element_id=element_id,
            filename=filename,
            error=exc.message,
        )
        return _error(f"Error: image saved as {url} but updating the element failed: {exc.message}")

    logger.info("Element image set", project=grant.key, element_id=element_id, filename=filename)
    return _success(
        f'Set image for element "{element_id}": {filename} ({_kb(image.data)}KB)',
        {
            "success": True,
            "elementId": element_id,
            "filename": filename,
            "mediaUrl": url,
            "sizeBytes": len(image.data),
            **image.generation,
        },
    )


async def apply_project_cover(ctx: McpContext, grant: ProjectGrant, image: AcquiredImage) -> ToolResponse:
    validation = validate_image(image.data)
    if not validation.valid:
        return _error(f"Error: Invalid image - {validation.error}")

    services = get_services(ctx)
    mime_type = validation.mime_type or image.mime_type
    filename = f"cover-{_timestamp()}.{extension_for(mime_type)}"
    url = media_url(filename)

    record = await services.metadata.find_project(grant.owner, grant.slug)
    previous = record.cover_image if record is not None else None

    await services.blob_store.save_project_file(grant.owner, grant.slug, filename, image.data, mime_type)
    await services.metadata.update_project_cover(grant.project_id, filename)

    try:
        await project_documents(ctx, grant).set_cover_media_id(strip_extension(filename))
    except InkweldError as exc:
        logger.error(
            "Cover saved but project meta document update failed",
            project=grant.key,
            filename=filename,
            error=exc.message,
        )
        return _error(
            f"Error: cover saved as {url} but updating the project document failed: {exc.message}"
        )

    # Old cover goes only once every reference points at the new one.
    if previous and previous != filename:
        if await services.blob_store.project_file_exists(grant.owner, grant.slug, previous):
            await services.blob_store.delete_project_file(grant.owner, grant.slug, previous)

    logger.info("Project cover set", project=grant.key, filename=filename, bytes=len(image.data))
    return _success(
        f"Set project cover image: {filename} ({_kb(image.data)}KB)",
        {
            "success": True,
            "filename": filename,
            "mediaUrl": url,
            "sizeBytes": len(image.data),
            **image.generation,
        },
    )


@reports_errors("generating image")
async def _tool_generate_image(ctx: McpContext, arguments: Dict[str, Any]) -> ToolResponse:
    grant = resolve_project(ctx, arguments.get("project"), GENERATE_IMAGES)
    if not isinstance(grant, ProjectGrant):
        return grant
    payload = GenerateImageInput.model_validate(arguments)

    image = await generate_image_bytes(ctx, payload.prompt, payload.profile_id, payload.size)
    if not isinstance(image, AcquiredImage):
        return image

    filename = f"generated-{_timestamp()}.{extension_for(image.mime_type)}"
    await get_services(ctx).blob_store.save_project_file(
        grant.owner, grant.slug, filename, image.data, image.mime_type
    )
    return _success(
        f"Image ready: {filename} ({_kb(image.data)}KB)",
        {
            "success": True,
            "filename": filename,
            "mediaUrl": media_url(filename),
            "sizeBytes": len(image.data),
            **image.generation,
        },
        extra_content=[_image(base64.b64encode(image.data).decode("ascii"), image.mime_type)],
    )


@reports_errors("setting element image")
async def _tool_set_element_image(ctx: McpContext, arguments: Dict[str, Any]) -> ToolResponse:
    grant = resolve_project(ctx, arguments.get("project"), WRITE_WORLDBUILDING)
    if not isinstance(grant, ProjectGrant):
        return grant
    payload = SetElementImageInput.model_validate(arguments)

    image = await acquire_supplied_image(ctx, grant, payload.base64_data, payload.media_url)
    if not isinstance(image, AcquiredImage):
        return image
    return await apply_element_image(ctx, grant, payload.element_id, image)


@reports_errors("generating element image")
async def _tool_generate_and_set_element_image(ctx: McpContext, arguments: Dict[str, Any]) -> ToolResponse:
    grant = resolve_project(ctx, arguments.get("project"), WRITE_WORLDBUILDING)
    if not isinstance(grant, ProjectGrant):
        return grant
    denied = _require_generate(grant, grant.key)
    if denied is not None:
        return denied
    payload = GenerateElementImageInput.model_validate(arguments)

    image = await generate_image_bytes(ctx, payload.prompt, payload.profile_id, payload.size)
    if not isinstance(image, AcquiredImage):
        return image
    return await apply_element_image(ctx, grant, payload.element_id, image)


@reports_errors("setting project cover")
async def _tool_set_project_cover(ctx: McpContext, arguments: Dict[str, Any]) -> ToolResponse:
    grant = resolve_project(ctx, arguments.get("project"), WRITE_WORLDBUILDING)
    if not isinstance(grant, ProjectGrant):
        return grant
    payload = SetProjectCoverInput.model_validate(arguments)

    image = await acquire_supplied_image(ctx, grant, payload.base64_data, payload.media_url)
    if not isinstance(image, AcquiredImage):
        return image
    return await apply_project_cover(ctx, grant, image)


@reports_errors("generating project cover")
async def _tool_generate_project_cover(ctx: McpContext, arguments: Dict[str, Any]) -> ToolResponse:
    grant = resolve_project(ctx, arguments.get("project"), WRITE_WORLDBUILDING)
    if not isinstance(grant, ProjectGrant):
        return grant
    denied = _require_generate(grant, grant.key)
    if denied is not None:
        return denied
    payload = GenerateProjectCoverInput.model_validate(arguments)

    image = await generate_image_bytes(ctx, payload.prompt, payload.profile_id, cover=True)
    if not isinstance(image, AcquiredImage):
        return image
    return await apply_project_cover(ctx, grant, image)


@reports_errors("listing image profiles")
async def _tool_list_image_profiles(ctx: McpContext, arguments: Dict[str, Any]) -> ToolResponse:
    profiles = await get_services(ctx).metadata.list_image_profiles(enabled_only=True)
    lines = [f"Enabled image profiles: {len(profiles)}"]
    for profile in profiles[:20]:
        default = f", default {profile.default_size}" if profile.default_size else ""
        lines.append(f"- {profile.id}: {profile.name} ({profile.provider}/{profile.model_id}{default})")
    return _success(
        "\n".join(lines),
        {"success": True, "total": len(profiles), "profiles": [p.to_public() for p in profiles]},
    )
