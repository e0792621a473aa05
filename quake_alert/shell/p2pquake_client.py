"""P2P Earthquake WebSocket Client - Imperative Shell.

This module owns the persistent connection to the P2P earthquake feed and
dispatches each frame to the handler registered for its category. All
network I/O is contained here; parsing is in the core module.

Frames whose category has no handler are ignored. A handler that raises is
logged and does not affect the connection or later frames.
"""

import asyncio
import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable

from websockets.asyncio.client import connect
from websockets.exceptions import ConnectionClosedError, WebSocketException

from quake_alert.core.events import (
    EEW_CODE,
    QUAKE_CODE,
    TSUNAMI_CODE,
    EEWEvent,
    QuakeEvent,
    TsunamiEvent,
    parse_eew,
    parse_quake,
    parse_tsunami,
)


logger = logging.getLogger(__name__)


PRODUCTION_URL = "wss://api.p2pquake.net/v2/ws"
SANDBOX_URL = "wss://api-realtime-sandbox.p2pquake.net/v2/ws"

# Handshake timeout (seconds)
DEFAULT_OPEN_TIMEOUT = 10.0


class ConnectionState(Enum):
    """Lifecycle state of the feed connection."""
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"


class UpstreamConnectionError(Exception):
    """Raised when the feed handshake fails."""


@dataclass(frozen=True)
class StreamHandlers:
    """Coroutine handlers, one per event category."""
    on_quake: Callable[[QuakeEvent], Awaitable[Any]]
    on_tsunami: Callable[[TsunamiEvent], Awaitable[Any]]
    on_eew: Callable[[EEWEvent], Awaitable[Any]]


@dataclass(frozen=True)
class _Route:
    name: str
    parse: Callable[[dict[str, Any]], Any]
    handler: Callable[[Any], Awaitable[Any]]


class P2PQuakeClient:
    """Client for the P2P earthquake real-time feed.

    This is part of the imperative shell - it handles WebSocket I/O.

    States move Disconnected -> Connecting -> Connected -> Disconnected.
    Reconnecting is left to the caller.
    """

    def __init__(
        self,
        handlers: StreamHandlers,
        production: bool = False,
        open_timeout: float = DEFAULT_OPEN_TIMEOUT,
        connect_factory: Callable[..., Awaitable[Any]] = connect,
    ) -> None:
        """Initialize feed client.

        Args:
            handlers: Handlers for quake, tsunami and early-warning events
            production: Use the production endpoint instead of the sandbox
            open_timeout: Handshake timeout in seconds
            connect_factory: Coroutine function opening a WebSocket
        """
        self.url = PRODUCTION_URL if production else SANDBOX_URL
        self.open_timeout = open_timeout
        self.state = ConnectionState.DISCONNECTED

        self._connect = connect_factory
        self._routes = {
            QUAKE_CODE: _Route("quake", parse_quake, handlers.on_quake),
            TSUNAMI_CODE: _Route("tsunami", parse_tsunami, handlers.on_tsunami),
            EEW_CODE: _Route("eew", parse_eew, handlers.on_eew),
        }
        self._ws: Any = None
        self._reader: asyncio.Task | None = None
        self._tasks: set[asyncio.Task] = set()

    @property
    def connected(self) -> bool:
        return self.state is ConnectionState.CONNECTED

    @property
    def pending(self) -> int:
        """Number of handler invocations still running."""
        return len(self._tasks)

    def _track(self, task: asyncio.Future) -> None:
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def connect(self) -> None:
        """Open the feed connection and start reading frames.

        Returns once the handshake completes. Calling it while connected
        does nothing.

        Raises:
            UpstreamConnectionError: If the handshake fails
        """
        if self.state is ConnectionState.CONNECTED:
            return

        self.state = ConnectionState.CONNECTING
        logger.info("Connecting to P2PQuake WebSocket at %s", self.url)

        try:
            ws = await self._connect(self.url, open_timeout=self.open_timeout)
        except (OSError, asyncio.TimeoutError, WebSocketException) as e:
            self.state = ConnectionState.DISCONNECTED
            logger.error("Failed to connect to P2PQuake WebSocket: %s", e)
            raise UpstreamConnectionError(f"Failed to connect to {self.url}: {e}") from e

        self._ws = ws
        self.state = ConnectionState.CONNECTED
        logger.info("Connected to P2PQuake WebSocket")

        self._reader = asyncio.create_task(self._read_loop(ws))

    def disconnect(self) -> None:
        """Start closing the connection without waiting for teardown."""
        ws = self._ws
        self.state = ConnectionState.DISCONNECTED

        if ws is None:
            return

        logger.info("Disconnecting from P2PQuake WebSocket...")
        self._ws = None
        self._track(asyncio.ensure_future(ws.close()))

    async def wait_closed(self) -> None:
        """Wait until the current connection stops delivering frames.

        Cancelling the wait leaves the reader running.
        """
        if self._reader is not None:
            await asyncio.shield(self._reader)

    async def drain(self, timeout: float | None = None) -> None:
        """Wait for in-flight handler invocations to finish.

        Args:
            timeout: Give up after this many seconds (None waits forever)
        """
        if self._tasks:
            await asyncio.wait(set(self._tasks), timeout=timeout)

    async def _read_loop(self, ws: Any) -> None:
        try:
            async for message in ws:
                self.dispatch_frame(message)
        except (ConnectionClosedError, WebSocketException, OSError) as e:
            logger.error("P2PQuake WebSocket error: %s", e)
        finally:
            if self._ws is ws:
                self._ws = None
                self.state = ConnectionState.DISCONNECTED
            logger.warning("Disconnected from P2PQuake WebSocket")

    def dispatch_frame(self, message: str | bytes) -> asyncio.Task | None:
        """Route one raw frame to its category handler.

        The handler runs in its own task so that a slow delivery does not
        hold up later frames.

        Args:
            message: Raw JSON frame

        Returns:
            The handler task, or None if the frame was ignored
        """
        try:
            data = json.loads(message)
        except (TypeError, ValueError) as e:
            logger.warning("Ignoring malformed frame: %s", e)
            return None

        if not isinstance(data, dict):
            logger.warning("Ignoring non-object frame")
            return None

        code = data.get("code")
        route = self._routes.get(code) if isinstance(code, int) else None
        if route is None:
            logger.debug("Ignoring frame with code %s", code)
            return None

        logger.debug(
            "Received %s frame (code=%s, time=%s)",
            route.name,
            code,
            data.get("time"),
        )

        task = asyncio.create_task(self._invoke(route, data))
        self._track(task)
        return task

    async def _invoke(self, route: _Route, data: dict[str, Any]) -> None:
        try:
            event = route.parse(data)
            await route.handler(event)
        except Exception:
            logger.exception(
                "Error in %s handler (id=%s, time=%s)",
                route.name,
                data.get("id"),
                data.get("time"),
            )
