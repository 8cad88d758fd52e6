"""Tests for JSON-RPC method dispatch."""

import pytest
from mcp.types import GetPromptResult, Prompt, PromptArgument, PromptMessage, TextContent

from conftest import PROJECT, make_context
from inkweld_mcp import SERVER_NAME
from inkweld_mcp.mcp_server.dispatcher import Dispatcher
from inkweld_mcp.mcp_server.jsonrpc import PROTOCOL_VERSION, JsonRpcRequest
from inkweld_mcp.mcp_server.models import TextResourceContents
from inkweld_mcp.mcp_server.registry import PromptHandler, Registries, ResourceHandler
from inkweld_mcp.mcp_server.routing import create_registries
from inkweld_mcp.permissions import READ_ELEMENTS, READ_PROJECT, WRITE_ELEMENTS


@pytest.fixture
def dispatcher(logger):
    return Dispatcher(create_registries(logger), logger)


def request(method, params=None, request_id=1):
    return JsonRpcRequest(
        method=method, id=request_id, params=params or {}, is_notification=request_id is None
    )


class TestLifecycle:
    """initialize, ping and notifications."""

    async def test_initialize(self, dispatcher, admin_ctx):
        response = await dispatcher.dispatch(
            request(
                "initialize",
                {"protocolVersion": "2024-11-05", "clientInfo": {"name": "test-client"}},
            ),
            admin_ctx,
        )
        result = response["result"]
        assert result["protocolVersion"] == PROTOCOL_VERSION
        assert result["serverInfo"]["name"] == SERVER_NAME
        assert result["capabilities"]["tools"] == {"listChanged": False}
        assert admin_ctx.initialized is True
        assert admin_ctx.client_info == {"name": "test-client"}

    async def test_ping(self, dispatcher, admin_ctx):
        response = await dispatcher.dispatch(request("ping", request_id="p-1"), admin_ctx)
        assert response == {"jsonrpc": "2.0", "id": "p-1", "result": {}}

    async def test_notification_has_no_response(self, dispatcher, admin_ctx):
        assert await dispatcher.dispatch(request("notifications/initialized", request_id=None), admin_ctx) is None

    async def test_failed_notification_has_no_response(self, dispatcher, admin_ctx):
        assert await dispatcher.dispatch(request("no/such", request_id=None), admin_ctx) is None

    async def test_unknown_method(self, dispatcher, admin_ctx):
        response = await dispatcher.dispatch(request("sampling/createMessage"), admin_ctx)
        assert response["error"]["code"] == -32601
        assert response["error"]["message"] == "Unknown method: sampling/createMessage"

    async def test_prompts_and_templates_are_empty(self, dispatcher, admin_ctx):
        assert (await dispatcher.dispatch(request("prompts/list"), admin_ctx))["result"] == {"prompts": []}
        templates = await dispatcher.dispatch(request("resources/templates/list"), admin_ctx)
        assert templates["result"] == {"resourceTemplates": []}

    async def test_unknown_prompt(self, dispatcher, admin_ctx):
        response = await dispatcher.dispatch(request("prompts/get", {"name": "outline"}), admin_ctx)
        assert response["error"]["code"] == -32601


class TestToolVisibility:
    """tools/list filters by permission."""

    async def test_admin_sees_every_tool(self, dispatcher, admin_ctx):
        response = await dispatcher.dispatch(request("tools/list"), admin_ctx)
        tools = response["result"]["tools"]
        assert len(tools) == 29
        tree = next(t for t in tools if t["name"] == "get_project_tree")
        assert tree["inputSchema"]["required"] == ["project"]

    async def test_read_only_key_sees_read_tools(self, dispatcher, components):
        ctx = make_context(components, [READ_PROJECT, READ_ELEMENTS])
        response = await dispatcher.dispatch(request("tools/list"), ctx)
        names = {t["name"] for t in response["result"]["tools"]}
        assert "get_project_tree" in names
        assert "list_image_profiles" in names
        assert "get_media_content" in names
        assert "create_element" not in names
        assert "search_worldbuilding" not in names
        assert "generate_image" not in names

    async def test_no_grants_sees_nothing(self, dispatcher, components):
        ctx = make_context(components, [])
        response = await dispatcher.dispatch(request("tools/list"), ctx)
        assert response["result"]["tools"] == []


class TestToolsCall:
    """tools/call routing and error mapping."""

    async def test_call_returns_tool_result(self, dispatcher, admin_ctx):
        response = await dispatcher.dispatch(
            request("tools/call", {"name": "get_project_tree", "arguments": {"project": PROJECT}}),
            admin_ctx,
        )
        result = response["result"]
        assert result["isError"] is False
        assert result["content"][0]["type"] == "text"
        assert result["structuredContent"]["total"] == 6

    async def test_missing_name(self, dispatcher, admin_ctx):
        response = await dispatcher.dispatch(request("tools/call", {"arguments": {}}), admin_ctx)
        assert response["error"] == {"code": -32602, "message": "Missing required parameter: name"}

    async def test_arguments_must_be_object(self, dispatcher, admin_ctx):
        response = await dispatcher.dispatch(
            request("tools/call", {"name": "get_project_tree", "arguments": ["x"]}), admin_ctx
        )
        assert response["error"]["code"] == -32602

    async def test_unknown_tool(self, dispatcher, admin_ctx):
        response = await dispatcher.dispatch(request("tools/call", {"name": "format_disk"}), admin_ctx)
        assert response["error"] == {"code": -32601, "message": "Unknown tool: format_disk"}

    async def test_tool_without_permission(self, dispatcher, viewer_ctx):
        response = await dispatcher.dispatch(
            request("tools/call", {"name": "create_element", "arguments": {"project": PROJECT}}),
            viewer_ctx,
        )
        assert response["error"]["code"] == -32600
        assert response["error"]["message"] == f"Permission denied. Required: {WRITE_ELEMENTS}"

    async def test_validation_failure_becomes_error_result(self, dispatcher, admin_ctx):
        response = await dispatcher.dispatch(
            request("tools/call", {"name": "create_element", "arguments": {"project": PROJECT, "type": "ITEM"}}),
            admin_ctx,
        )
        result = response["result"]
        assert result["isError"] is True
        text = result["content"][0]["text"]
        assert text.startswith("Error: invalid arguments")
        assert "Missing required fields: name" in text

    async def test_unexpected_exception_is_internal_error(self, dispatcher, admin_ctx, engine, monkeypatch):
        async def explode(*args, **kwargs):
            raise RuntimeError("engine on fire")

        monkeypatch.setattr(engine, "get_array", explode)
        response = await dispatcher.dispatch(
            request("tools/call", {"name": "get_project_tree", "arguments": {"project": PROJECT}}),
            admin_ctx,
        )
        assert response["error"] == {"code": -32603, "message": "engine on fire"}


class TestResourceMethods:
    """resources/list and resources/read."""

    async def test_list(self, dispatcher, admin_ctx):
        response = await dispatcher.dispatch(request("resources/list"), admin_ctx)
        uris = [r["uri"] for r in response["result"]["resources"]]
        assert uris == [
            "inkweld://projects",
            "inkweld://project/alice/novel",
            "inkweld://project/alice/novel/elements",
            "inkweld://project/alice/novel/worldbuilding",
            "inkweld://project/alice/novel/relationships",
            "inkweld://project/alice/novel/schemas",
        ]
        assert all(r["mimeType"] == "application/json" for r in response["result"]["resources"])

    async def test_read(self, dispatcher, admin_ctx):
        response = await dispatcher.dispatch(
            request("resources/read", {"uri": "inkweld://project/alice/novel/elements"}), admin_ctx
        )
        [contents] = response["result"]["contents"]
        assert contents["uri"] == "inkweld://project/alice/novel/elements"
        assert contents["mimeType"] == "application/json"
        assert '"Characters"' in contents["text"]

    async def test_read_missing_uri(self, dispatcher, admin_ctx):
        response = await dispatcher.dispatch(request("resources/read", {}), admin_ctx)
        assert response["error"]["code"] == -32602

    async def test_read_unknown_resource(self, dispatcher, admin_ctx):
        response = await dispatcher.dispatch(
            request("resources/read", {"uri": "inkweld://project/bob/secret/elements"}), admin_ctx
        )
        assert response["error"] == {
            "code": -32002,
            "message": "Resource not found: inkweld://project/bob/secret/elements",
        }


class SilentResources(ResourceHandler):
    name = "silent"

    def __init__(self):
        self.reads = []

    async def list(self, ctx):
        return []

    async def read(self, ctx, uri):
        self.reads.append(uri)
        return None


class NotesResources(ResourceHandler):
    name = "notes"

    async def list(self, ctx):
        return []

    async def read(self, ctx, uri):
        if uri != "inkweld://notes":
            return None
        return TextResourceContents(uri=uri, mimeType="text/plain", text="remember the lighthouse")


async def render_outline(ctx, arguments):
    return GetPromptResult(
        description="Chapter outline",
        messages=[
            PromptMessage(
                role="user",
                content=TextContent(type="text", text=f"Outline chapter {arguments.get('chapter', '?')}"),
            )
        ],
    )


@pytest.fixture
def custom_registries():
    registries = Registries()
    registries.add_resource(SilentResources())
    registries.add_resource(NotesResources())
    registries.add_prompt(
        PromptHandler(
            prompt=Prompt(
                name="outline",
                description="Draft a chapter outline",
                arguments=[PromptArgument(name="chapter", required=True)],
            ),
            get_prompt=render_outline,
        )
    )
    registries.freeze()
    return registries


class TestCustomHandlers:
    """Handlers registered on a fresh Registries."""

    async def test_read_falls_through_to_next_handler(self, custom_registries, logger, admin_ctx):
        dispatcher = Dispatcher(custom_registries, logger)
        response = await dispatcher.dispatch(request("resources/read", {"uri": "inkweld://notes"}), admin_ctx)
        assert response["result"] == {
            "contents": [
                {"uri": "inkweld://notes", "mimeType": "text/plain", "text": "remember the lighthouse"}
            ]
        }
        assert custom_registries.resources[0].reads == ["inkweld://notes"]

    async def test_no_handler_matches(self, custom_registries, logger, admin_ctx):
        dispatcher = Dispatcher(custom_registries, logger)
        response = await dispatcher.dispatch(request("resources/read", {"uri": "inkweld://other"}), admin_ctx)
        assert response["error"]["code"] == -32002

    async def test_prompts_list(self, custom_registries, logger, admin_ctx):
        dispatcher = Dispatcher(custom_registries, logger)
        [prompt] = (await dispatcher.dispatch(request("prompts/list"), admin_ctx))["result"]["prompts"]
        assert prompt["name"] == "outline"
        assert prompt["description"] == "Draft a chapter outline"
        assert prompt["arguments"] == [{"name": "chapter", "required": True}]

    async def test_prompts_get(self, custom_registries, logger, admin_ctx):
        dispatcher = Dispatcher(custom_registries, logger)
        response = await dispatcher.dispatch(
            request("prompts/get", {"name": "outline", "arguments": {"chapter": "3"}}), admin_ctx
        )
        result = response["result"]
        assert result["description"] == "Chapter outline"
        assert result["messages"] == [
            {"role": "user", "content": {"type": "text", "text": "Outline chapter 3"}}
        ]

    def test_frozen_registries_reject_prompts(self, custom_registries):
        with pytest.raises(RuntimeError, match="frozen"):
            custom_registries.add_prompt(
                PromptHandler(prompt=Prompt(name="late"), get_prompt=render_outline)
            )
