"""Host activation glue: start, restart, stop and report on the server."""

from __future__ import annotations

import logging
from collections.abc import Callable

from chat_mcp_server.host import LoggingNotifier, Notifier
from chat_mcp_server.instance import ServerInstance, ServerProvider
from chat_mcp_server.settings import McpSettings

logger = logging.getLogger(__name__)

RETRY_ACTION = "Retry"
RESTART_NOW_ACTION = "Restart Now"


class ServerController:
    """Drives a :class:`ServerInstance` on behalf of the host.

    Lifecycle failures never escape these methods: they are logged and shown
    through the notifier, with a retry offered when activation fails.
    """

    def __init__(
        self,
        provider: ServerProvider,
        settings_source: Callable[[], McpSettings] = McpSettings.from_env,
        notifier: Notifier | None = None,
    ) -> None:
        self._provider = provider
        self._settings_source = settings_source
        self._notifier = notifier or LoggingNotifier()
        self._server: ServerInstance | None = None

    @property
    def server(self) -> ServerInstance | None:
        return self._server

    @property
    def running(self) -> bool:
        return self._server is not None and self._server.listening

    async def activate(self) -> ServerInstance | None:
        """Start the server if the settings enable it."""
        try:
            settings = self._settings_source()
            if not settings.enabled:
                logger.info("MCP Server is disabled in settings")
                return None

            logger.info("Activating MCP Server...")
            self._server = self._provider.get_instance()
            await self._server.start(settings.port)
            logger.info(
                "MCP Server started successfully on port %d",
                self._server.get_port(),
            )
            return self._server
        except Exception as exc:
            logger.error("Failed to start MCP Server: %s", exc)
            action = await self._notifier.show(
                "warning", f"MCP Server failed to start: {exc}", RETRY_ACTION
            )
            if action == RETRY_ACTION:
                await self.restart()
            return self._server if self.running else None

    async def restart(self) -> None:
        """Close the server if needed and start it on the current port."""
        try:
            if self.running:
                await self._server.close()

            settings = self._settings_source()
            self._server = self._provider.get_instance()
            await self._server.start(settings.port)
        except Exception as exc:
            message = f"Failed to restart MCP Server: {exc}"
            logger.error(message)
            await self._notifier.show("error", message)
            return

        message = f"MCP Server restarted on port {self._server.get_port()}"
        logger.info(message)
        await self._notifier.show("info", message)

    async def stop(self) -> None:
        if not self.running:
            await self._notifier.show("info", "MCP Server is not running")
            return
        try:
            await self._server.close()
        except Exception as exc:
            message = f"Failed to stop MCP Server: {exc}"
            logger.error(message)
            await self._notifier.show("error", message)
            return
        logger.info("MCP Server stopped by user command")
        await self._notifier.show("info", "MCP Server stopped")

    def status(self) -> str:
        if self.running:
            return f"MCP Server is running on port {self._server.get_port()}"
        return "MCP Server is not running"

    async def settings_changed(self) -> None:
        """Offer a restart after the host's MCP settings changed."""
        logger.info("MCP configuration changed, restart may be required")
        action = await self._notifier.show(
            "info",
            "MCP Server configuration changed. Restart the server to apply changes.",
            RESTART_NOW_ACTION,
        )
        if action == RESTART_NOW_ACTION:
            await self.restart()

    async def deactivate(self) -> None:
        if not self.running:
            return
        try:
            await self._server.close()
            logger.info("MCP Server deactivated successfully")
        except Exception:
            logger.exception("Error deactivating MCP Server")
