"""Request/response envelopes for the tool-dispatch protocol."""

from __future__ import annotations

import json
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from chat_mcp.errors import raise_malformed

LIST_TOOLS_METHODS = frozenset({"list_tools", "tools/list"})
CALL_TOOL_METHODS = frozenset({"call_tool", "tools/call"})
INITIALIZE_METHOD = "initialize"
PING_METHOD = "ping"

RequestId = Union[str, int, None]


class ProtocolRequest(BaseModel):
    """A decoded request envelope."""

    model_config = ConfigDict(extra="ignore")

    jsonrpc: str | None = None
    id: RequestId = None
    method: str
    params: dict[str, Any] | None = None


class ProtocolError(BaseModel):
    code: int
    message: str


class ProtocolResponse(BaseModel):
    """Either ``result`` or ``error``, always echoing the request id."""

    jsonrpc: str | None = None
    id: RequestId = None
    result: dict[str, Any] | None = None
    error: ProtocolError | None = None

    @classmethod
    def success(
        cls, request: ProtocolRequest, result: dict[str, Any]
    ) -> ProtocolResponse:
        return cls(jsonrpc=request.jsonrpc, id=request.id, result=result)

    @classmethod
    def failure(
        cls, request: ProtocolRequest, code: int, message: str
    ) -> ProtocolResponse:
        return cls(
            jsonrpc=request.jsonrpc,
            id=request.id,
            error=ProtocolError(code=code, message=message),
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize for the wire, dropping the branch that is not set."""
        payload: dict[str, Any] = {"id": self.id}
        if self.jsonrpc is not None:
            payload["jsonrpc"] = self.jsonrpc
        if self.error is not None:
            payload["error"] = self.error.model_dump()
        else:
            payload["result"] = self.result if self.result is not None else {}
        return payload


class _BareToolCall(BaseModel):
    """Shorthand body ``{"name": ..., "arguments": {...}}``."""

    model_config = ConfigDict(extra="ignore")

    id: RequestId = None
    name: str
    arguments: dict[str, Any] = Field(default_factory=dict)


def parse_request(data: Any) -> ProtocolRequest:
    """Turn decoded JSON into a :class:`ProtocolRequest`.

    A body without ``method`` but with ``name`` is read as a ``call_tool``
    request carrying that name and its ``arguments``.

    Raises:
        MalformedRequestError: If the data is not a request object.
    """
    if not isinstance(data, dict):
        raise_malformed("Request body must be a JSON object")
    try:
        if "method" not in data and "name" in data:
            call = _BareToolCall.model_validate(data)
            return ProtocolRequest(
                id=call.id,
                method="call_tool",
                params={"name": call.name, "arguments": call.arguments},
            )
        return ProtocolRequest.model_validate(data)
    except ValidationError as error:
        raise_malformed(
            "Request is not a valid protocol envelope",
            error.errors(include_url=False),
        )


def decode_request(body: bytes) -> ProtocolRequest:
    """Decode a raw HTTP body into a request envelope.

    Raises:
        MalformedRequestError: If the body is not valid JSON or not a request.
    """
    if not body.strip():
        raise_malformed("Request body is empty")
    try:
        data = json.loads(body.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as error:
        raise_malformed(f"Invalid JSON body: {error}")
    return parse_request(data)
