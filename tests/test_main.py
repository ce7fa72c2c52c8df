"""CLI behavior smoke tests."""

from __future__ import annotations

import json

import pytest

from chat_mcp_server import main as server_main
from chat_mcp_server.settings import McpSettings


class _DummyApp:
    """Shim FastMCP app to capture run invocations without stdio I/O."""

    def __init__(self) -> None:
        self.run_calls: list[dict[str, object]] = []

    def run(self, *, transport: str, **kwargs: object) -> None:
        self.run_calls.append({"transport": transport, **kwargs})


def test_catalog_flag_prints_tools(capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = server_main.main(["--catalog"])

    assert exit_code == 0
    catalog = json.loads(capsys.readouterr().out)
    assert catalog["tools"][0]["name"] == "load_chat_session"
    assert catalog["tools"][0]["description"]


def test_stdio_transport_runs_fastmcp(monkeypatch: pytest.MonkeyPatch) -> None:
    dummy_app = _DummyApp()
    monkeypatch.setattr(
        server_main, "build_fastmcp_app", lambda _opener: (dummy_app, [])
    )

    exit_code = server_main.main(["--transport", "stdio"])

    assert exit_code == 0
    assert dummy_app.run_calls == [{"transport": "stdio"}]


def test_http_transport_uses_port_override(monkeypatch: pytest.MonkeyPatch) -> None:
    served: list[McpSettings] = []

    async def fake_serve(settings: McpSettings) -> int:
        served.append(settings)
        return 0

    monkeypatch.setenv("CHAT_MCP_PORT", "4100")
    monkeypatch.setattr(server_main, "serve_until_signalled", fake_serve)

    assert server_main.main([]) == 0
    assert server_main.main(["--port", "4200"]) == 0

    assert [settings.port for settings in served] == [4100, 4200]


def test_disabled_server_exits_cleanly(monkeypatch: pytest.MonkeyPatch) -> None:
    served: list[McpSettings] = []

    async def fake_serve(settings: McpSettings) -> int:
        served.append(settings)
        return 0

    monkeypatch.setenv("CHAT_MCP_ENABLED", "false")
    monkeypatch.setattr(server_main, "serve_until_signalled", fake_serve)

    assert server_main.main([]) == 0
    assert served == []
