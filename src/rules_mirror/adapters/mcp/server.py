from __future__ import annotations

import logging
from typing import Any, Optional

import mcp.types as types
from mcp.server.lowlevel import Server
from mcp.server.lowlevel.helper_types import ReadResourceContents
from mcp.server.stdio import stdio_server
from pydantic import AnyUrl

from rules_mirror.adapters.mcp.tool_router import TOOLS, ToolRouter
from rules_mirror.prompts.builders import PromptBuilder, PromptError
from rules_mirror.service.facade import RulesService

logger = logging.getLogger(__name__)


class ToolCallError(Exception):
    """Raised from a tool handler so the MCP server marks the result as an error."""


class RulesMcpServer:
    def __init__(self, *, service: RulesService, name: str = "rules-mirror") -> None:
        self._service = service
        self._router = ToolRouter(service)
        self._prompts = PromptBuilder(service)
        self._server: Server = Server(name)
        self._register_handlers()

    @property
    def server(self) -> Server:
        return self._server

    def _register_handlers(self) -> None:
        server = self._server

        @server.list_tools()
        async def list_tools() -> list[types.Tool]:
            return [
                types.Tool(name=tool.name, description=tool.description, inputSchema=dict(tool.input_schema))
                for tool in TOOLS
            ]

        @server.call_tool()
        async def call_tool(name: str, arguments: Optional[dict[str, Any]]) -> list[types.TextContent]:
            result = await self._router.call_tool(name, arguments)
            if result.is_error:
                raise ToolCallError(result.text)
            return [types.TextContent(type="text", text=result.text)]

        @server.list_prompts()
        async def list_prompts() -> list[types.Prompt]:
            return [
                types.Prompt(
                    name=prompt.name,
                    description=prompt.description,
                    arguments=[
                        types.PromptArgument(name=arg.name, description=arg.description, required=arg.required)
                        for arg in prompt.arguments
                    ],
                )
                for prompt in self._prompts.definitions()
            ]

        @server.get_prompt()
        async def get_prompt(name: str, arguments: Optional[dict[str, str]]) -> types.GetPromptResult:
            try:
                built = await self._prompts.build(name, arguments)
                description, text = built.description, built.text
            except PromptError as e:
                logger.warning("Failed to build prompt. name=%s error=%s", name, e)
                description, text = None, f"Error building prompt: {e}"
            return types.GetPromptResult(
                description=description,
                messages=[
                    types.PromptMessage(role="user", content=types.TextContent(type="text", text=text)),
                ],
            )

        @server.list_resources()
        async def list_resources() -> list[types.Resource]:
            descriptors = await self._service.list_resources()
            return [
                types.Resource(
                    uri=AnyUrl(descriptor.uri),
                    name=descriptor.name,
                    description=descriptor.description,
                    mimeType=descriptor.mime_type,
                )
                for descriptor in descriptors
            ]

        @server.read_resource()
        async def read_resource(uri: AnyUrl) -> list[ReadResourceContents]:
            result = await self._router.read_resource(str(uri).rstrip("/"))
            if result.is_error:
                return [ReadResourceContents(content=f"Error reading resource: {result.text}", mime_type="text/plain")]
            return [ReadResourceContents(content=result.text, mime_type="text/markdown")]

    async def run_stdio(self) -> None:
        logger.info(
            "Rules MCP server running on stdio. mirror=%s ttl_seconds=%s",
            self._service.mirror_path,
            self._service.cache.ttl_seconds,
        )
        async with stdio_server() as (read_stream, write_stream):
            await self._server.run(read_stream, write_stream, self._server.create_initialization_options())
