"""Host activation glue around the server instance."""

from __future__ import annotations

import socket
from collections.abc import Iterator

import pytest
from pydantic import ValidationError

from chat_mcp_server.activation import (
    RESTART_NOW_ACTION,
    RETRY_ACTION,
    ServerController,
)
from chat_mcp_server.instance import ServerInstance, ServerProvider
from chat_mcp_server.settings import McpSettings

from conftest import FakeNotifier, RecordingOpener, make_instance


class _CountingProvider(ServerProvider):
    def __init__(self) -> None:
        self.created = 0

        def factory() -> ServerInstance:
            self.created += 1
            return make_instance(RecordingOpener())

        super().__init__(factory)


@pytest.fixture()
def busy_port() -> Iterator[int]:
    blocker = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    blocker.bind(("127.0.0.1", 0))
    blocker.listen()
    try:
        yield blocker.getsockname()[1]
    finally:
        blocker.close()


@pytest.mark.anyio()
async def test_disabled_settings_never_bind() -> None:
    provider = _CountingProvider()
    controller = ServerController(
        provider, settings_source=lambda: McpSettings(enabled=False)
    )

    assert await controller.activate() is None
    assert provider.created == 0
    assert controller.status() == "MCP Server is not running"


@pytest.mark.anyio()
async def test_activate_status_and_deactivate() -> None:
    controller = ServerController(
        _CountingProvider(), settings_source=lambda: McpSettings(port=0)
    )

    server = await controller.activate()
    assert server is not None
    try:
        assert controller.running
        port = server.get_port()
        assert controller.status() == f"MCP Server is running on port {port}"
    finally:
        await controller.deactivate()

    assert not controller.running
    assert server.closed is True


@pytest.mark.anyio()
async def test_activation_failure_offers_retry(busy_port: int) -> None:
    notifier = FakeNotifier()
    controller = ServerController(
        _CountingProvider(),
        settings_source=lambda: McpSettings(port=busy_port),
        notifier=notifier,
    )

    assert await controller.activate() is None

    level, message, actions = notifier.shown[0]
    assert level == "warning"
    assert "failed to start" in message
    assert actions == (RETRY_ACTION,)


@pytest.mark.anyio()
async def test_retry_restarts_with_fresh_settings(busy_port: int) -> None:
    ports = iter([busy_port, 0])
    notifier = FakeNotifier(answer=RETRY_ACTION)
    controller = ServerController(
        _CountingProvider(),
        settings_source=lambda: McpSettings(port=next(ports)),
        notifier=notifier,
    )

    server = await controller.activate()
    try:
        assert server is not None
        assert server.listening
        assert notifier.shown[-1][0] == "info"
        assert "restarted on port" in notifier.shown[-1][1]
    finally:
        await controller.deactivate()


@pytest.mark.anyio()
async def test_stop_when_not_running_reports_it() -> None:
    notifier = FakeNotifier()
    controller = ServerController(
        _CountingProvider(),
        settings_source=lambda: McpSettings(port=0),
        notifier=notifier,
    )

    await controller.stop()

    assert notifier.shown == [("info", "MCP Server is not running", ())]


@pytest.mark.anyio()
async def test_stop_closes_running_server() -> None:
    notifier = FakeNotifier()
    controller = ServerController(
        _CountingProvider(),
        settings_source=lambda: McpSettings(port=0),
        notifier=notifier,
    )
    server = await controller.activate()

    await controller.stop()

    assert server is not None and server.closed
    assert notifier.shown[-1] == ("info", "MCP Server stopped", ())


@pytest.mark.anyio()
async def test_settings_change_can_restart_same_instance() -> None:
    provider = _CountingProvider()
    notifier = FakeNotifier(answer=RESTART_NOW_ACTION)
    controller = ServerController(
        provider, settings_source=lambda: McpSettings(port=0), notifier=notifier
    )
    first = await controller.activate()

    await controller.settings_changed()
    try:
        assert controller.server is first
        assert controller.running
        assert provider.created == 1
    finally:
        await controller.deactivate()


def test_settings_from_env() -> None:
    settings = McpSettings.from_env(
        {"CHAT_MCP_ENABLED": "false", "CHAT_MCP_PORT": "4100"}
    )

    assert settings == McpSettings(enabled=False, port=4100)
    assert McpSettings.from_env({}) == McpSettings(enabled=True, port=3000)


def test_settings_reject_bad_port() -> None:
    with pytest.raises(ValidationError):
        McpSettings.from_env({"CHAT_MCP_PORT": "70000"})
