"""A small in-process tool server: named tools with handlers and results."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any


@dataclass
class ToolResult:
    """The outcome of a tool call: text content, an error flag and metadata."""

    text: str
    is_error: bool = False
    meta: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def success(cls, text: str, meta: Mapping[str, Any] | None = None) -> "ToolResult":
        """Build a successful result."""
        return cls(text=text, is_error=False, meta=dict(meta or {}))

    @classmethod
    def failure(cls, text: str) -> "ToolResult":
        """Build an error result carrying ``text`` as its message."""
        return cls(text=text, is_error=True)


Handler = Callable[[Mapping[str, Any]], ToolResult]


@dataclass
class Tool:
    """A tool definition with its JSON input schema and handler."""

    name: str
    description: str
    handler: Handler
    input_schema: dict[str, Any] = field(
        default_factory=lambda: {"type": "object", "properties": {}}
    )


class UnknownToolError(LookupError):
    """Raised when a tool that is not registered is called."""


class ToolServer:
    """Holds a set of tools and dispatches calls to them."""

    def __init__(self, name: str, version: str = "1.0.0") -> None:
        self.name = name
        self.version = version
        self._tools: dict[str, Tool] = {}

    def add_tool(self, tool: Tool) -> None:
        """Register ``tool``, replacing any tool of the same name."""
        self._tools[tool.name] = tool

    def list_tools(self) -> list[Tool]:
        """Return the registered tools in registration order."""
        return list(self._tools.values())

    def call_tool(self, name: str, arguments: Mapping[str, Any] | None = None) -> ToolResult:
        """Call the tool named ``name`` with ``arguments``."""
        try:
            tool = self._tools[name]
        except KeyError:
            raise UnknownToolError(f"unknown tool: {name}") from None
        return tool.handler(dict(arguments or {}))