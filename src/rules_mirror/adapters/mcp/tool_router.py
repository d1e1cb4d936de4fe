from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from rules_mirror.mirror.catalog import README_RESOURCE_NAME, RULE_URI_SCHEME
from rules_mirror.service.facade import RulesService
from rules_mirror.service.models import ServiceResult

logger = logging.getLogger(__name__)

_REFRESH_PROPERTY = {
    "type": "boolean",
    "description": "Force refresh from Git repository (default: false)",
    "default": False,
}


@dataclass(frozen=True, slots=True)
class ToolDefinition:
    name: str
    description: str
    input_schema: Mapping[str, Any]


TOOLS: tuple[ToolDefinition, ...] = (
    ToolDefinition(
        name="get_rule",
        description="Retrieve a specific rule by name from the Git repository",
        input_schema={
            "type": "object",
            "properties": {
                "ruleName": {
                    "type": "string",
                    "description": "Name of the rule file without extension (e.g., 'documentation-consistency')",
                },
                "refresh": _REFRESH_PROPERTY,
            },
            "required": ["ruleName"],
        },
    ),
    ToolDefinition(
        name="list_rules",
        description="List all available rules from the Git repository",
        input_schema={"type": "object", "properties": {"refresh": _REFRESH_PROPERTY}},
    ),
    ToolDefinition(
        name="get_all_rules",
        description="Get all rules as a single combined document",
        input_schema={"type": "object", "properties": {"refresh": _REFRESH_PROPERTY}},
    ),
    ToolDefinition(
        name="get_rule_readme",
        description="Get the README.md file that explains how to use the rules",
        input_schema={"type": "object", "properties": {"refresh": _REFRESH_PROPERTY}},
    ),
    ToolDefinition(
        name="refresh_rules",
        description="Force refresh all rules from the Git repository",
        input_schema={"type": "object", "properties": {}},
    ),
)


def _refresh_flag(arguments: Mapping[str, Any]) -> bool:
    return arguments.get("refresh") is True


class ToolRouter:
    """Maps tool calls and resource URIs onto service operations."""

    def __init__(self, service: RulesService) -> None:
        self._service = service

    async def call_tool(self, name: str, arguments: Optional[Mapping[str, Any]] = None) -> ServiceResult:
        arguments = arguments or {}
        logger.debug("Tool call received. name=%s", name)

        if name == "get_rule":
            rule_name = arguments.get("ruleName")
            if not isinstance(rule_name, str) or not rule_name.strip():
                return ServiceResult.error("Missing required argument: ruleName")
            return await self._service.get_rule(rule_name, force_refresh=_refresh_flag(arguments))
        if name == "list_rules":
            return await self._service.list_rules(force_refresh=_refresh_flag(arguments))
        if name == "get_all_rules":
            return await self._service.get_all_rules(force_refresh=_refresh_flag(arguments))
        if name == "get_rule_readme":
            return await self._service.get_readme(force_refresh=_refresh_flag(arguments))
        if name == "refresh_rules":
            return await self._service.refresh()

        return ServiceResult.error(f"Unknown tool: {name}")

    async def read_resource(self, uri: str) -> ServiceResult:
        if not uri.startswith(RULE_URI_SCHEME) or not uri[len(RULE_URI_SCHEME) :]:
            return ServiceResult.error(f"Invalid resource URI: {uri}")

        rule_name = uri[len(RULE_URI_SCHEME) :]
        if rule_name == README_RESOURCE_NAME:
            return await self._service.get_readme()
        return await self._service.get_rule(rule_name)
