"""Boundary protocols for the host environment embedding the server."""

from __future__ import annotations

import logging
from typing import Any, Literal, Protocol

logger = logging.getLogger(__name__)

NotificationLevel = Literal["info", "warning", "error"]


class ChatHost(Protocol):
    """Host capability able to run UI commands."""

    def has_chat(self) -> bool:
        """Return whether a chat panel is available in the host."""
        ...

    async def execute_command(self, command: str, *args: Any) -> Any:
        """Run a host command, raising on failure."""
        ...


class Notifier(Protocol):
    """Surface for user-visible notifications."""

    async def show(
        self, level: NotificationLevel, message: str, *actions: str
    ) -> str | None:
        """Show ``message`` and return the chosen action, if any."""
        ...


class LoggingNotifier:
    """Notifier for headless hosts; logs and never picks an action."""

    _levels = {
        "info": logging.INFO,
        "warning": logging.WARNING,
        "error": logging.ERROR,
    }

    async def show(
        self, level: NotificationLevel, message: str, *actions: str
    ) -> str | None:
        logger.log(self._levels[level], message)
        return None
