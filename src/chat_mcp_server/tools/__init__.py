"""Tool registration helpers for the chat MCP server."""

from __future__ import annotations

from chat_mcp.tools import ToolDefinition
from chat_mcp_server.chat import ChatSessionOpener
from chat_mcp_server.tools.chat_session import load_chat_session_tool


def build_tools(opener: ChatSessionOpener) -> list[ToolDefinition]:
    """Instantiate all tool definitions with the provided chat opener."""
    return [
        load_chat_session_tool(opener),
    ]
