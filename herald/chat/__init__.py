"""Pokémon Showdown chat session management."""

from __future__ import annotations

from .backoff import ExponentialBackoff
from .errors import ChatError, ChatLoginError, ChatTransportError
from .login import LoginClient, ShowdownLoginClient
from .protocol import ServerMessage, format_chat, parse_frame, to_user_id
from .session import ChatSessionManager, ConnectionState, OutboundQueue
from .transport import (
    ChatConnection,
    ChatTransport,
    WebSocketConnection,
    WebSocketTransport,
)

__all__ = [
    "ChatConnection",
    "ChatError",
    "ChatLoginError",
    "ChatSessionManager",
    "ChatTransport",
    "ChatTransportError",
    "ConnectionState",
    "ExponentialBackoff",
    "LoginClient",
    "OutboundQueue",
    "ServerMessage",
    "ShowdownLoginClient",
    "WebSocketConnection",
    "WebSocketTransport",
    "format_chat",
    "parse_frame",
    "to_user_id",
]
