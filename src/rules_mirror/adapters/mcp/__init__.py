"""MCP adapter: exposes the rules service as tools, prompts and resources."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rules_mirror.adapters.mcp.tool_router import TOOLS, ToolDefinition, ToolRouter

if TYPE_CHECKING:
    from rules_mirror.adapters.mcp.server import RulesMcpServer

__all__ = ["RulesMcpServer", "TOOLS", "ToolDefinition", "ToolRouter"]


def __getattr__(name: str):
    if name == "RulesMcpServer":
        from rules_mirror.adapters.mcp.server import RulesMcpServer as _RulesMcpServer

        return _RulesMcpServer
    raise AttributeError(name)
