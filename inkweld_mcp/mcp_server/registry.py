"""Resource, tool and prompt registries.

Registries are filled once at startup (see ``routing.register_default_handlers``)
and frozen before the transport accepts traffic. Entries are never removed.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from mcp.types import Prompt, Tool

from inkweld_mcp.mcp_server.context import McpContext
from inkweld_mcp.mcp_server.models import ResourceDescriptor, TextResourceContents
from inkweld_mcp.mcp_server.tool_types import PromptRender, ToolExecute


class ResourceHandler(ABC):
    """Abstract resource handler"""

    name: str = "resource"

    @abstractmethod
    async def list(self, ctx: McpContext) -> List[ResourceDescriptor]:
        """
        List the resources this handler serves to ``ctx``

        Only resources whose read permission the context holds are returned.
        """
        pass

    @abstractmethod
    async def read(self, ctx: McpContext, uri: str) -> Optional[TextResourceContents]:
        """
        Read a resource

        Returns:
            Contents, or None when the uri is not recognised or the caller
            lacks permission, so the next handler can be tried
        """
        pass


@dataclass
class ToolHandler:
    tool: Tool
    execute: ToolExecute
    required_permissions: List[str] = field(default_factory=list)

    @property
    def name(self) -> str:
        return self.tool.name


@dataclass
class PromptHandler:
    prompt: Prompt
    get_prompt: PromptRender

    @property
    def name(self) -> str:
        return self.prompt.name


class Registries:
    def __init__(self) -> None:
        self.resources: List[ResourceHandler] = []
        self.tools: Dict[str, ToolHandler] = {}
        self.prompts: Dict[str, PromptHandler] = {}
        self._frozen = False

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> None:
        self._frozen = True

    def _check_open(self) -> None:
        if self._frozen:
            raise RuntimeError("Registries are frozen; register handlers before serving traffic")

    def add_resource(self, handler: ResourceHandler) -> None:
        self._check_open()
        self.resources.append(handler)

    def add_tool(self, handler: ToolHandler) -> None:
        self._check_open()
        if handler.name in self.tools:
            raise ValueError(f"Tool already registered: {handler.name}")
        self.tools[handler.name] = handler

    def add_prompt(self, handler: PromptHandler) -> None:
        self._check_open()
        if handler.name in self.prompts:
            raise ValueError(f"Prompt already registered: {handler.name}")
        self.prompts[handler.name] = handler
