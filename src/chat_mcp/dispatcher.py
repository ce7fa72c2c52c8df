"""Resolve protocol requests against the tool registry."""

from __future__ import annotations

import logging
from typing import Any

from mcp import types

from chat_mcp import __version__
from chat_mcp.errors import McpServerError, ToolExecutionError, raise_malformed
from chat_mcp.protocol import (
    CALL_TOOL_METHODS,
    INITIALIZE_METHOD,
    LIST_TOOLS_METHODS,
    PING_METHOD,
    ProtocolRequest,
    ProtocolResponse,
)
from chat_mcp.tools import ToolRegistry

logger = logging.getLogger(__name__)

SERVER_NAME = "chat-session-mcp-server"


class RequestDispatcher:
    """Execute ``list_tools`` and ``call_tool`` requests.

    Request-scoped failures (unknown tool, bad arguments, handler errors) are
    raised as :class:`~chat_mcp.errors.RequestError` subclasses for the
    transport to report. Methods the server does not know are answered with a
    protocol-level error response instead.
    """

    def __init__(self, registry: ToolRegistry) -> None:
        self._registry = registry

    @property
    def registry(self) -> ToolRegistry:
        return self._registry

    async def dispatch(self, request: ProtocolRequest) -> ProtocolResponse:
        """Run one request and build its response."""
        method = request.method
        if method in LIST_TOOLS_METHODS:
            return ProtocolResponse.success(request, self.list_tools())
        if method in CALL_TOOL_METHODS:
            name, arguments = self._call_params(request.params)
            result = await self.call_tool(name, arguments)
            return ProtocolResponse.success(request, result)
        if method == INITIALIZE_METHOD:
            return ProtocolResponse.success(request, self.initialize())
        if method == PING_METHOD:
            return ProtocolResponse.success(request, {})

        logger.warning("Rejecting unsupported method %r", method)
        return ProtocolResponse.failure(
            request, types.METHOD_NOT_FOUND, f"Method not found: {method}"
        )

    def list_tools(self) -> dict[str, Any]:
        result = types.ListToolsResult(
            tools=[
                types.Tool.model_validate(entry)
                for entry in self._registry.catalog()
            ]
        )
        return result.model_dump(by_alias=True, exclude_none=True)

    def initialize(self) -> dict[str, Any]:
        result = types.InitializeResult(
            protocolVersion=types.LATEST_PROTOCOL_VERSION,
            capabilities=types.ServerCapabilities(
                tools=types.ToolsCapability(listChanged=False)
            ),
            serverInfo=types.Implementation(name=SERVER_NAME, version=__version__),
        )
        return result.model_dump(by_alias=True, exclude_none=True)

    async def call_tool(self, name: str, arguments: dict[str, Any]) -> dict[str, Any]:
        """Validate arguments, run the handler and wrap its summary.

        Raises:
            UnknownToolError: If ``name`` is not in the registry.
            InvalidArgumentsError: If the arguments do not fit the schema.
            ToolExecutionError: If the handler fails.
        """
        tool = self._registry.get(name)
        validated = tool.validate(arguments)
        try:
            summary = await tool.handler(validated)
        except McpServerError:
            raise
        except Exception as exc:
            logger.error("Tool %s failed: %s", name, exc)
            raise ToolExecutionError(name, str(exc)) from exc

        result = types.CallToolResult(
            content=[types.TextContent(type="text", text=summary)],
            isError=False,
        )
        return result.model_dump(by_alias=True, exclude_none=True)

    @staticmethod
    def _call_params(params: dict[str, Any] | None) -> tuple[str, dict[str, Any]]:
        params = params or {}
        name = params.get("name")
        if not isinstance(name, str) or not name:
            raise_malformed("call_tool requires a tool name")
        arguments = params.get("arguments")
        if arguments is None:
            arguments = {}
        if not isinstance(arguments, dict):
            raise_malformed("call_tool arguments must be an object")
        return name, arguments
