"""Ways of surfacing a chat message to the user."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from functools import partial
from typing import Protocol

from chat_mcp_server.followups import FollowUpSupervisor
from chat_mcp_server.host import ChatHost, LoggingNotifier, Notifier

logger = logging.getLogger(__name__)

OPEN_CHAT_COMMAND = "chat.open"
SEND_TO_CHAT_COMMAND = "chat.sendMessage"
SEND_DELAY_SECONDS = 0.5

OPEN_OUTPUT_ACTION = "Open Output"
DISMISS_ACTION = "Dismiss"


class ChatSessionOpener(Protocol):
    """Capability used by the ``load_chat_session`` tool."""

    async def open(self, message: str) -> None:
        """Show ``message`` in a chat session, raising on failure."""
        ...


class OutputLogChatOpener:
    """Fallback opener: a notification plus an output-log line."""

    def __init__(
        self,
        notifier: Notifier | None = None,
        output: logging.Logger | None = None,
    ) -> None:
        self._notifier = notifier or LoggingNotifier()
        self._output = output or logging.getLogger("chat_mcp_server.output")

    async def open(self, message: str) -> None:
        action = await self._notifier.show(
            "info",
            f"Chat Session Started: {message}",
            OPEN_OUTPUT_ACTION,
            DISMISS_ACTION,
        )
        if action == OPEN_OUTPUT_ACTION:
            timestamp = datetime.now(timezone.utc).isoformat()
            self._output.info("[%s] Chat Session: %s", timestamp, message)


class CommandChatOpener:
    """Primary opener driving the host's chat panel through commands.

    The panel is opened right away; the message is sent by a follow-up a
    moment later so the panel has time to appear. The tool call returns as
    soon as the panel command succeeds. If the delayed send fails, the
    supervisor runs the fallback opener.
    """

    def __init__(
        self,
        host: ChatHost,
        supervisor: FollowUpSupervisor,
        fallback: ChatSessionOpener,
        *,
        open_command: str = OPEN_CHAT_COMMAND,
        send_command: str = SEND_TO_CHAT_COMMAND,
        send_delay: float = SEND_DELAY_SECONDS,
    ) -> None:
        self._host = host
        self._supervisor = supervisor
        self._fallback = fallback
        self._open_command = open_command
        self._send_command = send_command
        self._send_delay = send_delay

    async def open(self, message: str) -> None:
        try:
            await self._host.execute_command(self._open_command)
        except Exception as exc:
            logger.error("Opening the chat panel failed: %s", exc)
            await self._fallback.open(message)
            return

        self._supervisor.schedule(
            self._send_delay,
            partial(self._host.execute_command, self._send_command, message),
            fallback=partial(self._fallback.open, message),
            name="send-to-chat",
        )


def select_chat_opener(
    host: ChatHost | None,
    supervisor: FollowUpSupervisor,
    notifier: Notifier | None = None,
) -> ChatSessionOpener:
    """Pick the command opener when the host has a chat panel."""
    fallback = OutputLogChatOpener(notifier)
    if host is not None and host.has_chat():
        return CommandChatOpener(host, supervisor, fallback)
    logger.info("No chat panel available, using notification fallback")
    return fallback
