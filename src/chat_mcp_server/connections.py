"""Tracking of accepted connections for deterministic teardown."""

from __future__ import annotations

import asyncio
import logging

from uvicorn.protocols.http.h11_impl import H11Protocol

logger = logging.getLogger(__name__)


class ConnectionTracker:
    """Transports accepted by one listener.

    The tracker does not own the connections; peers and uvicorn close them
    in normal operation. It only gains the right to abort them when the
    listener shuts down. A new tracker is created for every listener, so
    nothing carries over a restart.
    """

    def __init__(self) -> None:
        self._transports: list[asyncio.BaseTransport] = []

    def __len__(self) -> int:
        return len(self._transports)

    def register(self, transport: asyncio.BaseTransport) -> None:
        self._transports.append(transport)

    def discard(self, transport: asyncio.BaseTransport) -> None:
        """Forget a transport whose peer has gone away."""
        try:
            self._transports.remove(transport)
        except ValueError:
            pass

    def terminate_all(self) -> int:
        """Abort every tracked transport, in-flight requests included.

        Returns:
            Number of transports that were aborted.
        """
        transports, self._transports = self._transports, []
        aborted = 0
        for transport in transports:
            if transport.is_closing():
                continue
            # abort() drops buffered writes; close() would wait for them.
            transport.abort()  # type: ignore[attr-defined]
            aborted += 1
        logger.debug("Aborted %d tracked connection(s)", aborted)
        return aborted


def tracked_protocol(tracker: ConnectionTracker) -> type[H11Protocol]:
    """Build a uvicorn HTTP protocol class that reports to ``tracker``."""

    class TrackedH11Protocol(H11Protocol):
        def connection_made(self, transport: asyncio.Transport) -> None:
            tracker.register(transport)
            super().connection_made(transport)

        def connection_lost(self, exc: Exception | None) -> None:
            tracker.discard(self.transport)
            super().connection_lost(exc)

    return TrackedH11Protocol
