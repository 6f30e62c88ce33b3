"""Tool layer: definitions, registry, and the Sleeper tools."""

from sleeper_mcp.tools.base import (
    Tool,
    ToolArgumentError,
    ToolDefinition,
    ToolNotFoundError,
    ToolResult,
)
from sleeper_mcp.tools.registry import ToolRegistry
from sleeper_mcp.tools.sleeper import (
    LeagueInfoTool,
    MatchupsTool,
    PlayerSearchTool,
    default_registry,
)

__all__ = [
    "LeagueInfoTool",
    "MatchupsTool",
    "PlayerSearchTool",
    "Tool",
    "ToolArgumentError",
    "ToolDefinition",
    "ToolNotFoundError",
    "ToolRegistry",
    "ToolResult",
    "default_registry",
]
