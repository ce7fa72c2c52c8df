"""Shared test fixtures."""

from __future__ import annotations

import asyncio
from typing import Any

import pytest

from chat_mcp.dispatcher import RequestDispatcher
from chat_mcp.tools import ToolRegistry
from chat_mcp_server.followups import FollowUpSupervisor
from chat_mcp_server.instance import ServerInstance
from chat_mcp_server.tools import build_tools


class RecordingOpener:
    """Chat opener that remembers every message it was asked to show."""

    def __init__(self, error: Exception | None = None) -> None:
        self.messages: list[str] = []
        self.error = error

    async def open(self, message: str) -> None:
        self.messages.append(message)
        if self.error is not None:
            raise self.error


class BlockingOpener:
    """Chat opener that stalls until the test releases it."""

    def __init__(self) -> None:
        self.entered = asyncio.Event()
        self.release = asyncio.Event()

    async def open(self, message: str) -> None:
        self.entered.set()
        await self.release.wait()


class FakeHost:
    """Host with a chat panel whose commands are recorded."""

    def __init__(self, failing: frozenset[str] = frozenset()) -> None:
        self.commands: list[tuple[str, tuple[Any, ...]]] = []
        self.failing = failing

    def has_chat(self) -> bool:
        return True

    async def execute_command(self, command: str, *args: Any) -> Any:
        self.commands.append((command, args))
        if command in self.failing:
            raise RuntimeError(f"command {command} is unavailable")
        return None


class FakeNotifier:
    """Notifier that records notifications and answers with a fixed action."""

    def __init__(self, answer: str | None = None) -> None:
        self.shown: list[tuple[str, str, tuple[str, ...]]] = []
        self.answer = answer

    async def show(self, level: str, message: str, *actions: str) -> str | None:
        self.shown.append((level, message, actions))
        return self.answer if self.answer in actions else None


def make_instance(
    opener: Any, supervisor: FollowUpSupervisor | None = None
) -> ServerInstance:
    """Build a server around ``opener`` that binds an ephemeral port."""
    dispatcher = RequestDispatcher(ToolRegistry(build_tools(opener)))
    return ServerInstance(dispatcher, supervisor=supervisor, port=0)


@pytest.fixture()
def anyio_backend() -> str:
    """uvicorn only runs on asyncio."""
    return "asyncio"


@pytest.fixture()
def recording_opener() -> RecordingOpener:
    return RecordingOpener()


@pytest.fixture()
def dispatcher(recording_opener: RecordingOpener) -> RequestDispatcher:
    return RequestDispatcher(ToolRegistry(build_tools(recording_opener)))
