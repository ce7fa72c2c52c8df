"""Error types raised by the chat MCP server."""

from __future__ import annotations

from typing import NoReturn, TypedDict


class McpErrorPayload(TypedDict):
    """Structured JSON payload for server errors."""

    error: dict[str, object | None]


class McpServerError(Exception):
    """Base error carrying a stable ``code`` and a JSON-friendly payload."""

    code = "McpServerError"

    def __init__(self, message: str, details: object | None = None) -> None:
        """Create an error whose message is prefixed with the server name."""
        super().__init__(f"MCP Server: {message}")
        self.details = details

    @property
    def message(self) -> str:
        """Return the full, prefixed error message."""
        return str(self)

    def to_dict(self) -> McpErrorPayload:
        """Return the structured error payload."""
        return {
            "error": {
                "type": self.code,
                "message": self.message,
                "details": self.details,
            }
        }


class LifecycleError(McpServerError):
    """Raised by listener start/close; handled by the host."""


class AlreadyListeningError(LifecycleError):
    code = "AlreadyListening"

    def __init__(self) -> None:
        super().__init__("Server already started")


class NotStartedError(LifecycleError):
    code = "NotStarted"

    def __init__(self) -> None:
        super().__init__("Server not started")


class BindError(LifecycleError):
    """The listener could not bind its loopback address."""

    code = "BindFailure"

    def __init__(self, reason: str, port: int | None = None) -> None:
        super().__init__(f"Server failed: {reason}", details={"port": port})
        self.port = port


class CloseError(LifecycleError):
    """The listener reported an error while stopping."""

    code = "CloseFailure"

    def __init__(self, reason: str) -> None:
        super().__init__(f"Failed to close server: {reason}")


class RequestError(McpServerError):
    """Raised while serving one request; becomes an HTTP 500."""


class UnknownToolError(RequestError):
    code = "UnknownTool"

    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown tool: {name}", details={"name": name})
        self.name = name


class MalformedRequestError(RequestError):
    code = "MalformedRequest"


class InvalidArgumentsError(RequestError):
    code = "InvalidArguments"


class ToolExecutionError(RequestError):
    """A registered handler failed; the original message is kept."""

    code = "ToolExecutionFailure"

    def __init__(self, name: str, reason: str) -> None:
        super().__init__(
            f"Failed to run tool '{name}': {reason}",
            details={"name": name, "reason": reason},
        )
        self.name = name
        self.reason = reason


def raise_malformed(message: str, details: object | None = None) -> NoReturn:
    """Raise a :class:`MalformedRequestError` with a structured payload."""
    raise MalformedRequestError(message, details)
