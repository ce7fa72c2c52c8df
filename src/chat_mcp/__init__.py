"""chat_mcp package initialization."""

__version__ = "0.1.0"

from chat_mcp.dispatcher import RequestDispatcher  # noqa: E402
from chat_mcp.tools import ToolDefinition, ToolParameters, ToolRegistry  # noqa: E402

__all__ = [
    "RequestDispatcher",
    "ToolDefinition",
    "ToolParameters",
    "ToolRegistry",
    "__version__",
]
