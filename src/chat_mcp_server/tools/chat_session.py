"""The ``load_chat_session`` tool."""

from __future__ import annotations

from typing import Any

from pydantic import Field, field_validator

from chat_mcp.tools import ToolDefinition, ToolParameters
from chat_mcp_server.chat import ChatSessionOpener

DEFAULT_MESSAGE = "Hello world"


class LoadChatSessionParams(ToolParameters):
    """Parameters for the load_chat_session tool."""

    message: str = Field(
        default=DEFAULT_MESSAGE,
        description="Optional custom message to start the chat session with",
    )

    @field_validator("message", mode="before")
    @classmethod
    def _null_means_default(cls, value: Any) -> Any:
        return DEFAULT_MESSAGE if value is None else value


def load_chat_session_tool(opener: ChatSessionOpener) -> ToolDefinition:
    """Create the load_chat_session tool definition."""

    async def handler(raw_params: dict[str, Any]) -> str:
        params = LoadChatSessionParams.model_validate(raw_params)
        message = params.message or DEFAULT_MESSAGE
        await opener.open(message)
        return f'Chat session opened with message: "{message}"'

    return ToolDefinition(
        name="load_chat_session",
        description="Opens a new chat session with a greeting message",
        parameters_model=LoadChatSessionParams,
        handler=handler,
    )
