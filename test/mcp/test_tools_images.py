"""Tests for image generation, element images and project covers."""

import base64
import re

import pytest

from conftest import (
    JPEG_BYTES,
    OWNER,
    PNG_BYTES,
    PROJECT,
    PROJECT_ID,
    SLUG,
    call_tool,
    make_context,
    result_text,
)
from inkweld_mcp.documents import ProjectDocuments
from inkweld_mcp.exceptions import StorageError
from inkweld_mcp.permissions import GENERATE_IMAGES

PNG_B64 = base64.b64encode(PNG_BYTES).decode("ascii")


@pytest.fixture
def docs(engine):
    return ProjectDocuments(engine, OWNER, SLUG)


class TestGenerateImage:
    """Standalone generation saves the file and returns the image inline."""

    async def test_generates_and_saves(self, admin_ctx, image_provider, blob_store):
        result = await call_tool(admin_ctx, "generate_image", {"project": PROJECT, "prompt": "a misty harbour"})
        assert not result["isError"]

        data = result["structuredContent"]
        assert re.fullmatch(r"generated-\d+\.png", data["filename"])
        assert data["mediaUrl"] == f"media://{data['filename']}"
        assert data["profileId"] == "default"
        assert data["provider"] == "stub"
        assert data["model"] == "gpt-image-1"
        assert data["revisedPrompt"] == "a revised prompt"
        assert result_text(result) == f"Image ready: {data['filename']} (0KB)"

        image = result["content"][1]
        assert image["type"] == "image"
        assert image["mimeType"] == "image/png"
        assert base64.b64decode(image["data"]) == PNG_BYTES

        assert await blob_store.read_project_file(OWNER, SLUG, data["filename"]) == PNG_BYTES
        [request] = image_provider.requests
        assert request.prompt == "a misty harbour"
        assert request.size == "1024x1024"

    async def test_size_override(self, admin_ctx, image_provider):
        await call_tool(admin_ctx, "generate_image", {"project": PROJECT, "prompt": "p", "size": "512x512"})
        assert image_provider.requests[0].size == "512x512"

    @pytest.mark.parametrize(
        "profile_id,message",
        [
            ("retired", "Error: Image profile is disabled: retired"),
            ("nope", "Error: Image profile not found: nope"),
        ],
    )
    async def test_bad_profile(self, admin_ctx, image_provider, profile_id, message):
        result = await call_tool(
            admin_ctx, "generate_image", {"project": PROJECT, "prompt": "p", "profileId": profile_id}
        )
        assert result["isError"] is True
        assert result_text(result) == message
        assert image_provider.requests == []

    async def test_no_enabled_profiles(self, admin_ctx, metadata):
        metadata.image_profiles.clear()
        result = await call_tool(admin_ctx, "generate_image", {"project": PROJECT, "prompt": "p"})
        assert result_text(result) == "Error: No enabled image profile found."

    async def test_provider_unavailable(self, admin_ctx, image_provider):
        image_provider.available = False
        result = await call_tool(admin_ctx, "generate_image", {"project": PROJECT, "prompt": "p"})
        assert result_text(result) == (
            "Error: No image generation provider is available. Please configure an AI image provider."
        )

    async def test_provider_returns_nothing(self, admin_ctx, image_provider):
        image_provider.images = 0
        result = await call_tool(admin_ctx, "generate_image", {"project": PROJECT, "prompt": "p"})
        assert result_text(result) == "Error: No images were generated"


class TestSetElementImage:
    """Element images are saved as media files and referenced by URL."""

    async def test_from_base64(self, admin_ctx, docs, blob_store):
        result = await call_tool(
            admin_ctx, "set_element_image", {"project": PROJECT, "elementId": "elena", "base64Data": PNG_B64}
        )
        assert result_text(result) == 'Set image for element "elena": element-elena.png (0KB)'
        identity = (await docs.get_worldbuilding("elena"))["identity"]
        assert identity["image"] == "media://element-elena.png"
        assert identity["description"].startswith("A swordswoman")
        assert await blob_store.read_project_file(OWNER, SLUG, "element-elena.png") == PNG_BYTES

    async def test_jpeg_data_url(self, admin_ctx, docs):
        data_url = "data:image/jpeg;base64," + base64.b64encode(JPEG_BYTES).decode("ascii")
        result = await call_tool(
            admin_ctx, "set_element_image", {"project": PROJECT, "elementId": "elena", "base64Data": data_url}
        )
        assert result["structuredContent"]["filename"] == "element-elena.jpg"
        assert (await docs.get_worldbuilding("elena"))["identity"]["image"] == "media://element-elena.jpg"

    async def test_from_existing_media(self, admin_ctx, docs, blob_store):
        await blob_store.save_project_file(OWNER, SLUG, "upload.png", PNG_BYTES, "image/png")
        result = await call_tool(
            admin_ctx,
            "set_element_image",
            {"project": PROJECT, "elementId": "marcus", "mediaUrl": "media://upload.png"},
        )
        assert result["structuredContent"]["mediaUrl"] == "media://element-marcus.png"
        assert await blob_store.project_file_exists(OWNER, SLUG, "element-marcus.png")

    @pytest.mark.parametrize(
        "arguments,message",
        [
            ({}, "Error: provide either base64Data or mediaUrl"),
            ({"base64Data": "   "}, "Error: provide either base64Data or mediaUrl"),
            ({"mediaUrl": "https://example.com/a.png"}, "Error: mediaUrl must look like media://filename.ext"),
            ({"mediaUrl": "media://missing.png"}, "Error: media file not found: missing.png"),
            (
                {"base64Data": base64.b64encode(b"plain text").decode("ascii")},
                "Error: Invalid image - unsupported image format",
            ),
        ],
    )
    async def test_invalid_sources(self, admin_ctx, docs, arguments, message):
        result = await call_tool(
            admin_ctx, "set_element_image", {"project": PROJECT, "elementId": "elena", **arguments}
        )
        assert result["isError"] is True
        assert result_text(result) == message
        assert "image" not in (await docs.get_worldbuilding("elena"))["identity"]


class TestGenerateAndSetElementImage:
    """Generation piped into the element image path."""

    async def test_generates_and_assigns(self, admin_ctx, docs, image_provider):
        result = await call_tool(
            admin_ctx,
            "generate_and_set_element_image",
            {"project": PROJECT, "elementId": "tavern", "prompt": "a smoky tavern"},
        )
        data = result["structuredContent"]
        assert data["filename"] == "element-tavern.png"
        assert data["provider"] == "stub"
        assert (await docs.get_worldbuilding("tavern"))["identity"]["image"] == "media://element-tavern.png"
        assert image_provider.requests[0].prompt == "a smoky tavern"

    async def test_requires_write_worldbuilding(self, components, image_provider):
        ctx = make_context(components, [GENERATE_IMAGES])
        result = await call_tool(
            ctx,
            "generate_and_set_element_image",
            {"project": PROJECT, "elementId": "tavern", "prompt": "p"},
        )
        assert result_text(result) == 'Error: No "write:worldbuilding" permission for project "alice/novel".'
        assert image_provider.requests == []


class TestProjectCover:
    """Covers update the media store, the metadata record and the project meta document."""

    async def test_set_cover(self, admin_ctx, docs, metadata, blob_store):
        result = await call_tool(admin_ctx, "set_project_cover", {"project": PROJECT, "base64Data": PNG_B64})
        filename = result["structuredContent"]["filename"]
        assert re.fullmatch(r"cover-\d+\.png", filename)
        assert result_text(result) == f"Set project cover image: {filename} (0KB)"

        record = await metadata.get_project(PROJECT_ID)
        assert record.cover_image == filename
        assert (await docs.get_project_meta())["coverMediaId"] == filename[: -len(".png")]
        assert await blob_store.project_file_exists(OWNER, SLUG, filename)

    async def test_replaces_previous_cover(self, admin_ctx, metadata, blob_store):
        await blob_store.save_project_file(OWNER, SLUG, "cover-1.png", PNG_BYTES, "image/png")
        await metadata.update_project_cover(PROJECT_ID, "cover-1.png")

        await call_tool(admin_ctx, "set_project_cover", {"project": PROJECT, "base64Data": PNG_B64})
        assert not await blob_store.project_file_exists(OWNER, SLUG, "cover-1.png")

    async def test_failed_save_keeps_previous_cover(self, admin_ctx, docs, metadata, blob_store, monkeypatch):
        await blob_store.save_project_file(OWNER, SLUG, "cover-1.png", PNG_BYTES, "image/png")
        await metadata.update_project_cover(PROJECT_ID, "cover-1.png")

        async def disk_full(*args, **kwargs):
            raise StorageError("disk full")

        monkeypatch.setattr(blob_store, "save_project_file", disk_full)
        result = await call_tool(admin_ctx, "set_project_cover", {"project": PROJECT, "base64Data": PNG_B64})

        assert result["isError"] is True
        assert "disk full" in result_text(result)
        assert (await metadata.get_project(PROJECT_ID)).cover_image == "cover-1.png"
        assert await blob_store.project_file_exists(OWNER, SLUG, "cover-1.png")
        assert (await docs.get_project_meta()).get("coverMediaId") is None

    async def test_generate_cover_is_landscape(self, admin_ctx, image_provider, metadata):
        result = await call_tool(
            admin_ctx, "generate_project_cover", {"project": PROJECT, "prompt": "a stormy coastline"}
        )
        assert image_provider.requests[0].size == "1248x832"
        assert result["structuredContent"]["revisedPrompt"] == "a revised prompt"
        assert (await metadata.get_project(PROJECT_ID)).cover_image == result["structuredContent"]["filename"]

    async def test_invalid_cover(self, admin_ctx, metadata):
        result = await call_tool(
            admin_ctx,
            "set_project_cover",
            {"project": PROJECT, "base64Data": base64.b64encode(b"GIF? no").decode("ascii")},
        )
        assert result["isError"] is True
        assert (await metadata.get_project(PROJECT_ID)).cover_image is None


async def test_list_image_profiles(admin_ctx):
    result = await call_tool(admin_ctx, "list_image_profiles", {})
    assert result_text(result) == (
        "Enabled image profiles: 1\n- default: Default (openai/gpt-image-1, default 1024x1024)"
    )
    [profile] = result["structuredContent"]["profiles"]
    assert profile["id"] == "default"
    assert profile["enabled"] is True
