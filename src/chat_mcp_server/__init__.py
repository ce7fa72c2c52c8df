"""Loopback Model Context Protocol server that opens host chat sessions."""

from chat_mcp_server.activation import ServerController
from chat_mcp_server.chat import (
    ChatSessionOpener,
    CommandChatOpener,
    OutputLogChatOpener,
    select_chat_opener,
)
from chat_mcp_server.instance import (
    ServerInstance,
    ServerProvider,
    ServerState,
    create_server_instance,
    get_instance,
)

__all__ = [
    "ChatSessionOpener",
    "CommandChatOpener",
    "OutputLogChatOpener",
    "ServerController",
    "ServerInstance",
    "ServerProvider",
    "ServerState",
    "create_server_instance",
    "get_instance",
    "select_chat_opener",
]
