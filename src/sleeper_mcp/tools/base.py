"""Tool base class and data structures.

Defines the interface every tool implements: a static definition, a typed
argument parser, and an async body.
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, ClassVar, Generic, TypeVar


class ToolNotFoundError(LookupError):
    """No tool is registered under the requested name."""


class ToolArgumentError(ValueError):
    """Call arguments a tool cannot work with. The message is shown to the caller."""


@dataclass(frozen=True)
class ToolDefinition:
    """Definition of a tool exposed through tools/list."""

    name: str
    description: str
    input_schema: dict[str, Any] = field(hash=False)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema,
        }


@dataclass
class ToolResult:
    """Outcome of one tools/call: text content blocks plus a failure flag."""

    content: list[dict[str, Any]]
    is_error: bool = False

    @classmethod
    def text(cls, text: str) -> ToolResult:
        """Build a successful single-block text result."""
        return cls(content=[{"type": "text", "text": text}])

    @classmethod
    def json(cls, payload: Any) -> ToolResult:
        """Build a successful result whose text block is ``payload`` as JSON."""
        return cls.text(json.dumps(payload))

    @classmethod
    def error(cls, message: str) -> ToolResult:
        """Build a tool-level failure carrying a human-readable message."""
        return cls(content=[{"type": "text", "text": message}], is_error=True)

    def to_dict(self) -> dict[str, Any]:
        return {"content": self.content, "isError": self.is_error}


ArgsT = TypeVar("ArgsT")


class Tool(ABC, Generic[ArgsT]):
    """Abstract base class for all tools.

    Subclasses set ``definition`` and implement ``parse_arguments`` and
    ``run``. Argument errors become tool-level failures; anything raised
    by ``run`` propagates to the caller.
    """

    definition: ClassVar[ToolDefinition]

    @property
    def name(self) -> str:
        """Return the tool name."""
        return self.definition.name

    @abstractmethod
    def parse_arguments(self, arguments: dict[str, Any]) -> ArgsT:
        """Convert raw call arguments into the tool's typed arguments.

        Raises:
            ToolArgumentError: If the arguments are invalid.
        """
        pass

    @abstractmethod
    async def run(self, args: ArgsT) -> ToolResult:
        """Execute the tool with validated arguments."""
        pass

    async def execute(self, arguments: dict[str, Any]) -> ToolResult:
        """Parse ``arguments`` and run the tool.

        Invalid arguments short-circuit to a failure result, so no
        upstream request is made for them.
        """
        try:
            args = self.parse_arguments(arguments)
        except ToolArgumentError as e:
            return ToolResult.error(str(e))
        return await self.run(args)
