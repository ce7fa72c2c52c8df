"""Entry point for the chat MCP server."""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import json
import logging
import signal

from chat_mcp.dispatcher import RequestDispatcher
from chat_mcp.tools import ToolRegistry
from chat_mcp_server.activation import ServerController
from chat_mcp_server.chat import OutputLogChatOpener
from chat_mcp_server.fastmcp_adapter import build_fastmcp_app
from chat_mcp_server.instance import ServerProvider
from chat_mcp_server.settings import McpSettings
from chat_mcp_server.tools import build_tools

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    parser = argparse.ArgumentParser(description="Chat session MCP server")
    parser.add_argument(
        "--catalog", action="store_true", help="Print the tool catalog and exit"
    )
    parser.add_argument(
        "--transport",
        choices=("http", "stdio"),
        default="http",
        help="Serve over the loopback HTTP listener or FastMCP stdio",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Loopback port (defaults to CHAT_MCP_PORT or 3000)",
    )
    parser.add_argument("--log-level", default="INFO", help="Logging level")
    return parser


async def serve_until_signalled(settings: McpSettings) -> int:
    """Run the HTTP listener until SIGINT or SIGTERM."""
    controller = ServerController(ServerProvider(), settings_source=lambda: settings)
    server = await controller.activate()
    if server is None:
        return 1

    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for signum in (signal.SIGINT, signal.SIGTERM):
        with contextlib.suppress(NotImplementedError):
            loop.add_signal_handler(signum, stop.set)
    await stop.wait()
    await controller.deactivate()
    return 0


def main(argv: list[str] | None = None) -> int:
    """Parse arguments and run the requested mode."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    opener = OutputLogChatOpener()
    if args.catalog:
        dispatcher = RequestDispatcher(ToolRegistry(build_tools(opener)))
        print(json.dumps(dispatcher.list_tools(), indent=2))
        return 0

    if args.transport == "stdio":
        app, _ = build_fastmcp_app(opener)
        app.run(transport="stdio")
        return 0

    settings = McpSettings.from_env()
    if args.port is not None:
        settings = settings.model_copy(update={"port": args.port})
    if not settings.enabled:
        logger.info("MCP Server is disabled in settings")
        return 0
    return asyncio.run(serve_until_signalled(settings))


if __name__ == "__main__":
    raise SystemExit(main())
