"""Tool registry - catalog of invocable tools and invoke-by-name entry point."""

from __future__ import annotations

from typing import Any

from jsonschema import Draft202012Validator

from sleeper_mcp.tools.base import Tool, ToolNotFoundError, ToolResult


class ToolRegistry:
    """Ordered catalog of tools keyed by name.

    The catalog is built once at startup and never changes afterwards,
    so listing is stable and side-effect free.
    """

    def __init__(self) -> None:
        """Initialize an empty registry."""
        self._tools: dict[str, Tool[Any]] = {}

    def register(self, tool: Tool[Any]) -> None:
        """Register a tool.

        Args:
            tool: Tool instance to register.

        Raises:
            ValueError: If a tool with the same name is already registered.
            jsonschema.SchemaError: If the tool's input schema is not valid JSON Schema.
        """
        if tool.name in self._tools:
            raise ValueError(f"Tool already registered: {tool.name}")

        Draft202012Validator.check_schema(tool.definition.input_schema)
        self._tools[tool.name] = tool

    def get(self, name: str) -> Tool[Any] | None:
        """Get a tool by name, or None if unknown."""
        return self._tools.get(name)

    def list_tools(self) -> list[dict[str, Any]]:
        """List all tools in MCP format, in registration order.

        Returns:
            List of tool definitions in MCP format.
        """
        return [tool.definition.to_dict() for tool in self._tools.values()]

    def names(self) -> list[str]:
        """Return registered tool names in registration order."""
        return list(self._tools)

    async def call_tool(self, name: str, arguments: dict[str, Any]) -> ToolResult:
        """Call a tool by name.

        Args:
            name: Name of the tool to call.
            arguments: Arguments to pass to the tool.

        Returns:
            ToolResult from the tool execution.

        Raises:
            ToolNotFoundError: If the tool is not registered.
        """
        tool = self._tools.get(name)
        if tool is None:
            raise ToolNotFoundError(f"Unknown tool: {name}")

        return await tool.execute(arguments)

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools
