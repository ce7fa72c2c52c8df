"""Listener lifecycle for the loopback MCP server.

A :class:`ServerInstance` binds a loopback socket, serves the HTTP transport
on it with uvicorn, and tears everything down deterministically on
:meth:`ServerInstance.close`: tracked connections are aborted first, the
listener stops next, and the instance is marked closed last. A closed
instance can be started again, which is how restart works.
"""

from __future__ import annotations

import asyncio
import contextlib
import enum
import logging
import socket
from collections.abc import Callable, Iterator
from dataclasses import dataclass

import uvicorn

from chat_mcp.dispatcher import RequestDispatcher
from chat_mcp.errors import (
    AlreadyListeningError,
    BindError,
    CloseError,
    NotStartedError,
)
from chat_mcp.tools import ToolRegistry
from chat_mcp_server.chat import select_chat_opener
from chat_mcp_server.connections import ConnectionTracker, tracked_protocol
from chat_mcp_server.followups import FollowUpSupervisor
from chat_mcp_server.host import ChatHost, Notifier
from chat_mcp_server.tools import build_tools
from chat_mcp_server.transport import build_app

logger = logging.getLogger(__name__)

LOOPBACK_HOST = "127.0.0.1"
DEFAULT_PORT = 3000
_READY_POLL_SECONDS = 0.01


class ServerState(enum.Enum):
    NOT_STARTED = "not_started"
    LISTENING = "listening"
    CLOSED = "closed"


class _EmbeddedServer(uvicorn.Server):
    """uvicorn server that leaves process signals to the host."""

    @contextlib.contextmanager
    def capture_signals(self) -> Iterator[None]:
        yield


@dataclass
class _Listener:
    """Everything that belongs to one bound socket."""

    server: _EmbeddedServer
    task: asyncio.Task[None]
    tracker: ConnectionTracker
    address: tuple[str, int]

    @property
    def active(self) -> bool:
        return self.server.started and not self.task.done()


def _bind_loopback(port: int) -> socket.socket:
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    try:
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.bind((LOOPBACK_HOST, port))
    except OSError as exc:
        sock.close()
        raise BindError(exc.strerror or str(exc), port=port) from exc
    return sock


class ServerInstance:
    """Owns the listener, its connections and the dispatcher it serves."""

    def __init__(
        self,
        dispatcher: RequestDispatcher,
        *,
        supervisor: FollowUpSupervisor | None = None,
        port: int = DEFAULT_PORT,
    ) -> None:
        self._dispatcher = dispatcher
        self._supervisor = supervisor or FollowUpSupervisor()
        self._port = port
        self._listener: _Listener | None = None
        self._starting = False
        self._closed = False

    @property
    def dispatcher(self) -> RequestDispatcher:
        return self._dispatcher

    @property
    def supervisor(self) -> FollowUpSupervisor:
        return self._supervisor

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def listening(self) -> bool:
        return self._listener is not None and self._listener.active

    @property
    def state(self) -> ServerState:
        if self.listening:
            return ServerState.LISTENING
        if self._closed:
            return ServerState.CLOSED
        return ServerState.NOT_STARTED

    @property
    def active_connections(self) -> int:
        return len(self._listener.tracker) if self._listener is not None else 0

    def get_address(self) -> tuple[str, int] | None:
        """Return the bound ``(host, port)`` while listening."""
        listener = self._listener
        if listener is not None and listener.active:
            return listener.address
        return None

    def get_port(self) -> int:
        """Return the bound port, or the configured one when not listening."""
        address = self.get_address()
        if address is not None:
            return address[1]
        return self._port

    async def start(self, port: int | None = None) -> None:
        """Bind the loopback listener and wait until it accepts connections.

        Args:
            port: Port to bind; ``0`` picks an ephemeral port. Defaults to the
                last configured port.

        Raises:
            AlreadyListeningError: If the current listener is active or
                another ``start`` is still waiting for its listener.
            BindError: If the socket could not be bound or served.
        """
        if self.listening or self._starting:
            raise AlreadyListeningError()

        # Held until the listener is published or the start fails.
        self._starting = True
        try:
            await self._start_listener(port)
        finally:
            self._starting = False

    async def _start_listener(self, port: int | None) -> None:
        if port is not None:
            self._port = port
        sock = _bind_loopback(self._port)
        address = sock.getsockname()[:2]

        tracker = ConnectionTracker()
        config = uvicorn.Config(
            build_app(self._dispatcher),
            http=tracked_protocol(tracker),
            lifespan="off",
            log_config=None,
            access_log=False,
        )
        server = _EmbeddedServer(config)
        task = asyncio.get_running_loop().create_task(
            server.serve(sockets=[sock]), name=f"mcp-listener-{address[1]}"
        )

        while not server.started and not task.done():
            await asyncio.sleep(_READY_POLL_SECONDS)

        if not server.started:
            sock.close()
            try:
                task.result()
            except Exception as exc:
                logger.error("MCP Server error: %s", exc)
                raise BindError(str(exc), port=self._port) from exc
            raise BindError("listener exited before it was ready", port=self._port)

        self._listener = _Listener(
            server=server, task=task, tracker=tracker, address=address
        )
        self._closed = False
        logger.info("MCP Server listening on port %d", address[1])

    async def close(self) -> None:
        """Abort connections, stop the listener, then mark the server closed.

        Calling ``close`` on a closed server does nothing.

        Raises:
            NotStartedError: If the server was never started.
            CloseError: If the listener failed while stopping.
        """
        if self._closed:
            return
        listener = self._listener
        if listener is None:
            raise NotStartedError()

        logger.debug("MCP Server: Attempting to close server.")
        listener.tracker.terminate_all()

        for server in listener.server.servers:
            server.close()
        listener.server.force_exit = True
        listener.server.should_exit = True
        try:
            await listener.task
        except Exception as exc:
            raise CloseError(str(exc)) from exc

        await self._supervisor.cancel_all()

        self._listener = None
        self._closed = True
        logger.debug("MCP Server: Server closed successfully.")


def create_server_instance(
    host: ChatHost | None = None,
    *,
    notifier: Notifier | None = None,
    port: int = DEFAULT_PORT,
) -> ServerInstance:
    """Wire the tool catalog, chat opener and dispatcher into an instance."""
    supervisor = FollowUpSupervisor()
    opener = select_chat_opener(host, supervisor, notifier)
    dispatcher = RequestDispatcher(ToolRegistry(build_tools(opener)))
    return ServerInstance(dispatcher, supervisor=supervisor, port=port)


class ServerProvider:
    """Hands out the one server instance of a host.

    The host creates a provider at activation and passes it to whatever
    needs the server. Every call to :meth:`get_instance` returns the same
    instance, so there is never more than one listener per provider.
    """

    def __init__(
        self, factory: Callable[[], ServerInstance] = create_server_instance
    ) -> None:
        self._factory = factory
        self._instance: ServerInstance | None = None

    def get_instance(self) -> ServerInstance:
        if self._instance is None:
            self._instance = self._factory()
        return self._instance


_default_provider = ServerProvider()


def get_instance() -> ServerInstance:
    """Return the process-wide server instance, creating it on first use."""
    return _default_provider.get_instance()
