"""Chat transports.

The session manager talks to the chat server through the small
:class:`ChatTransport` and :class:`ChatConnection` protocols, so tests can
substitute an in-memory server. :class:`WebSocketTransport` is the production
implementation.
"""

from __future__ import annotations

import typing as typ

from websockets.asyncio.client import connect
from websockets.exceptions import ConnectionClosed, WebSocketException

from .errors import ChatTransportError

if typ.TYPE_CHECKING:
    from websockets.asyncio.client import ClientConnection


class ChatConnection(typ.Protocol):
    """One open connection to the chat server."""

    async def send(self, frame: str) -> None:
        """Transmit one client frame."""
        ...

    async def recv(self) -> str:
        """Wait for the next server frame.

        Raises
        ------
        ChatTransportError
            When the connection is closed.

        """
        ...

    async def close(self) -> None:
        """Close the connection; never raises."""
        ...


class ChatTransport(typ.Protocol):
    """Factory for chat server connections."""

    async def connect(self, url: str) -> ChatConnection:
        """Open a connection to ``url``."""
        ...


class WebSocketConnection:
    """:class:`ChatConnection` over a ``websockets`` client connection."""

    def __init__(self, websocket: ClientConnection) -> None:
        """Wrap an open websocket."""
        self._websocket = websocket

    async def send(self, frame: str) -> None:
        """Transmit one client frame as a text message."""
        try:
            await self._websocket.send(frame)
        except ConnectionClosed as exc:
            raise ChatTransportError.connection_lost(str(exc)) from exc

    async def recv(self) -> str:
        """Wait for the next server frame."""
        try:
            message = await self._websocket.recv()
        except ConnectionClosed as exc:
            raise ChatTransportError.connection_lost(str(exc)) from exc
        if isinstance(message, bytes):
            return message.decode("utf-8", errors="replace")
        return message

    async def close(self) -> None:
        """Close the websocket with a normal closure code."""
        await self._websocket.close()


class WebSocketTransport:
    """:class:`ChatTransport` backed by the ``websockets`` library.

    Parameters
    ----------
    open_timeout
        Seconds allowed for the opening handshake.
    ping_interval
        Seconds between keepalive pings, or ``None`` to disable them.

    """

    def __init__(
        self, *, open_timeout: float = 10.0, ping_interval: float | None = 20.0
    ) -> None:
        """Store handshake and keepalive settings."""
        self._open_timeout = open_timeout
        self._ping_interval = ping_interval

    async def connect(self, url: str) -> WebSocketConnection:
        """Open a websocket to ``url``."""
        try:
            websocket = await connect(
                url,
                open_timeout=self._open_timeout,
                ping_interval=self._ping_interval,
                max_size=None,
            )
        except (OSError, TimeoutError, WebSocketException) as exc:
            raise ChatTransportError.connect_failed(url, str(exc)) from exc
        return WebSocketConnection(websocket)


__all__ = [
    "ChatConnection",
    "ChatTransport",
    "WebSocketConnection",
    "WebSocketTransport",
]
