"""Adapters for exposing the chat tools via FastMCP."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from fastmcp import FastMCP
from fastmcp.tools import Tool
from fastmcp.tools.tool import ToolResult

from chat_mcp.tools import ToolDefinition
from chat_mcp_server.chat import ChatSessionOpener
from chat_mcp_server.tools import build_tools


class ToolDefinitionAdapter(Tool):
    """Expose a :class:`ToolDefinition` as a FastMCP tool."""

    def __init__(self, definition: ToolDefinition) -> None:
        """Create a FastMCP tool wrapper for the provided definition."""
        super().__init__(
            name=definition.name,
            description=definition.description,
            parameters=definition.input_schema,
            tags=set(),
        )
        self._definition = definition

    async def run(self, arguments: dict[str, Any]) -> ToolResult:
        """Validate arguments and delegate to the wrapped handler."""
        validated_arguments = self._definition.validate(arguments)
        summary = await self._definition.handler(validated_arguments)
        return ToolResult(content=summary)


def to_fastmcp_tools(tool_definitions: Sequence[ToolDefinition]) -> list[Tool]:
    """Convert tool definitions into FastMCP-compatible tools."""
    return [ToolDefinitionAdapter(definition) for definition in tool_definitions]


def build_fastmcp_app(
    opener: ChatSessionOpener,
) -> tuple[FastMCP, list[ToolDefinition]]:
    """Create a FastMCP server instance with the chat tools registered."""
    app = FastMCP(
        name="chat-session-mcp-server",
        instructions="Opens chat sessions in the host over the Model Context Protocol.",
    )
    tool_definitions = build_tools(opener)
    for tool in to_fastmcp_tools(tool_definitions):
        app.add_tool(tool)
    return app, tool_definitions
