"""MCP tools/list and tools/call handlers.

Routes tool requests to the registry and converts tool-level problems
(unknown tool, bad arguments) into failure results rather than errors.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from sleeper_mcp.tools.base import ToolNotFoundError, ToolResult
from sleeper_mcp.tools.registry import ToolRegistry


@dataclass
class ToolsListResult:
    tools: list[dict[str, Any]]

    def to_dict(self) -> dict[str, Any]:
        return {"tools": self.tools}


class ToolsHandler:
    """Serves the tools/* methods from a ToolRegistry."""

    def __init__(self, registry: ToolRegistry) -> None:
        self._registry = registry

    def handle_list(self) -> ToolsListResult:
        return ToolsListResult(tools=self._registry.list_tools())

    async def handle_call(self, name: str, arguments: dict[str, Any]) -> ToolResult:
        """Run one tool.

        An unknown name yields an ``isError`` result naming the tool.
        Provider failures are not caught; the dispatcher reports them
        as internal errors.
        """
        try:
            return await self._registry.call_tool(name, arguments)
        except ToolNotFoundError:
            return ToolResult.error(f"Unknown tool: {name}")

    @staticmethod
    def extract_call(params: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        """Pull the tool name and arguments out of tools/call params.

        A missing name becomes "" (reported as an unknown tool) and
        non-object arguments become an empty mapping.
        """
        name = params.get("name")
        if not isinstance(name, str):
            name = "" if name is None else str(name)

        arguments = params.get("arguments")
        if not isinstance(arguments, dict):
            arguments = {}

        return name, arguments
