"""Runtime configuration for the relay.

Configuration is read once at start-up into immutable values and passed
explicitly to the components that need it.

Usage
-----
Load everything from the environment:

>>> import os
>>> os.environ.update(
...     HERALD_SERVER_URL="wss://sim3.psim.us/showdown/websocket",
...     HERALD_USER="herald",
...     HERALD_WEBHOOK_SECRET="s3cret",
...     HERALD_DEFAULT_ROOM="dev",
... )
>>> config = RelayConfig.from_env()
>>> config.all_rooms()
('dev',)

"""

from __future__ import annotations

import dataclasses as dc
import enum
import os
from pathlib import Path
from typing import TypeVar

from herald.logging import normalize_log_level
from herald.routing import (
    RoutingDocument,
    RoutingTable,
    RoutingValidationError,
    load_routing,
    parse_routing_json,
    to_room_id,
)
from herald.routing.validation import ROOM_ID_PATTERN

DEFAULT_LOGIN_URL = "https://play.pokemonshowdown.com/~~showdown/action.php"
_MAX_PORT = 65535


class ConfigurationError(RuntimeError):
    """Raised when the relay cannot start with the supplied configuration."""

    @classmethod
    def missing(cls, env_var: str) -> ConfigurationError:
        """Build an error for a required environment variable that is unset."""
        return cls(f"{env_var} must be set")

    @classmethod
    def invalid(cls, env_var: str, detail: str) -> ConfigurationError:
        """Build an error for an environment variable with an unusable value."""
        return cls(f"{env_var} is invalid: {detail}")


class BackpressurePolicy(enum.StrEnum):
    """What ``send`` does while the chat session is not ready."""

    DROP = "drop"
    BLOCK = "block"


class MessageFormat(enum.StrEnum):
    """Chat rendering dialect."""

    TEXT = "text"
    HTML = "html"


def _read(env_var: str) -> str:
    return os.environ.get(env_var, "").strip()


def _require(env_var: str) -> str:
    value = _read(env_var)
    if not value:
        raise ConfigurationError.missing(env_var)
    return value


def _parse_positive_int(env_var: str, default: int) -> int:
    """Read a positive integer env var, falling back to a default."""
    raw = _read(env_var)
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ConfigurationError.invalid(
            env_var, f"expected an integer, got {raw!r}"
        ) from exc
    if value < 1:
        raise ConfigurationError.invalid(env_var, f"must be positive, got {value}")
    return value


E = TypeVar("E", bound=enum.StrEnum)


def _parse_choice(env_var: str, enum_type: type[E], default: E) -> E:
    raw = _read(env_var).lower()
    if not raw:
        return default
    try:
        return enum_type(raw)
    except ValueError as exc:
        choices = ", ".join(member.value for member in enum_type)
        raise ConfigurationError.invalid(
            env_var, f"expected one of {choices}, got {raw!r}"
        ) from exc


def _parse_port() -> int:
    port = _parse_positive_int("HERALD_PORT", 8080)
    if port > _MAX_PORT:
        raise ConfigurationError.invalid(
            "HERALD_PORT", f"port {port} outside valid range 1-{_MAX_PORT}"
        )
    return port


def _load_routing_document() -> RoutingDocument:
    path = _read("HERALD_ROUTING_PATH")
    inline = _read("HERALD_ROUTING_JSON")
    if path and inline:
        msg = "set only one of HERALD_ROUTING_PATH and HERALD_ROUTING_JSON"
        raise ConfigurationError(msg)
    try:
        if path:
            return load_routing(Path(path))
        if inline:
            return parse_routing_json(inline)
    except RoutingValidationError as exc:
        env_var = "HERALD_ROUTING_PATH" if path else "HERALD_ROUTING_JSON"
        raise ConfigurationError.invalid(env_var, "; ".join(exc.issues)) from exc
    return RoutingDocument()


@dc.dataclass(frozen=True, slots=True)
class ChatConfig:
    """Settings for the chat server session.

    Attributes
    ----------
    server_url
        WebSocket URL of the chat server.
    username
        Account name the relay logs in as.
    password
        Account password. Empty logs in as an unregistered name.
    login_url
        Login server endpoint issuing assertions.
    send_interval
        Seconds between consecutive outbound frames.
    queue_size
        Bound on the outbound message queue.
    backpressure
        Behaviour of ``send`` while the session is not ready.
    connect_timeout
        Seconds allowed for opening the transport.
    login_timeout
        Seconds allowed between connecting and the server confirming login.
    idle_timeout
        Seconds without inbound frames before a ready session is considered
        dead. ``None`` disables the check.
    backoff_min, backoff_max
        Bounds of the exponential reconnect delay, in seconds.
    backoff_grace
        Seconds a session must stay ready before the delay resets.

    """

    server_url: str
    username: str
    password: str = ""
    login_url: str = DEFAULT_LOGIN_URL
    send_interval: float = 0.7
    queue_size: int = 1000
    backpressure: BackpressurePolicy = BackpressurePolicy.DROP
    connect_timeout: float = 10.0
    login_timeout: float = 30.0
    idle_timeout: float | None = None
    backoff_min: float = 1.0
    backoff_max: float = 60.0
    backoff_grace: float = 60.0


@dc.dataclass(frozen=True, slots=True)
class RelayConfig:
    """Complete relay configuration.

    Attributes
    ----------
    webhook_secret
        Shared secret used when a repository has no override.
    routing
        Compiled repository to room routing.
    chat
        Chat session settings.
    dedup_capacity
        Number of event fingerprints remembered for duplicate suppression.
    message_format
        Whether messages are rendered as plain text or HTML boxes.
    host, port
        Bind address of the webhook server.
    log_level
        Normalized log level name.

    """

    webhook_secret: str
    routing: RoutingTable
    chat: ChatConfig
    dedup_capacity: int = 1024
    message_format: MessageFormat = MessageFormat.TEXT
    host: str = "0.0.0.0"  # noqa: S104
    port: int = 8080
    log_level: str = "INFO"

    def rooms_for(self, repository: str) -> tuple[str, ...]:
        """Return the rooms announcing ``repository``."""
        return self.routing.rooms_for(repository)

    def secret_for(self, repository: str | None) -> str:
        """Return the webhook secret that signs ``repository``'s deliveries."""
        return self.routing.secret_for(repository) or self.webhook_secret

    def all_rooms(self) -> tuple[str, ...]:
        """Return every room the chat session should join."""
        return self.routing.all_rooms()

    @classmethod
    def from_env(cls) -> RelayConfig:
        """Create configuration from ``HERALD_*`` environment variables.

        Raises
        ------
        ConfigurationError
            If a required variable is missing, a value cannot be parsed, the
            routing document is invalid, or no room is configured at all.

        """
        chat = ChatConfig(
            server_url=_require("HERALD_SERVER_URL"),
            username=_require("HERALD_USER"),
            password=os.environ.get("HERALD_PASSWORD", ""),
            login_url=_read("HERALD_LOGIN_URL") or DEFAULT_LOGIN_URL,
            send_interval=_parse_positive_int("HERALD_SEND_INTERVAL_MS", 700) / 1000,
            queue_size=_parse_positive_int("HERALD_OUTBOUND_QUEUE_SIZE", 1000),
            backpressure=_parse_choice(
                "HERALD_BACKPRESSURE", BackpressurePolicy, BackpressurePolicy.DROP
            ),
        )
        secret = _require("HERALD_WEBHOOK_SECRET")

        default_room = _read("HERALD_DEFAULT_ROOM") or None
        if default_room is not None and not ROOM_ID_PATTERN.match(
            to_room_id(default_room)
        ):
            raise ConfigurationError.invalid(
                "HERALD_DEFAULT_ROOM", f"{default_room!r} is not a valid room id"
            )

        routing = RoutingTable.from_document(
            _load_routing_document(), default_room=default_room
        )
        if not routing.routes and routing.default_room is None:
            msg = (
                "no rooms configured: set HERALD_DEFAULT_ROOM or provide a "
                "routing document"
            )
            raise ConfigurationError(msg)

        level, _ = normalize_log_level(os.environ.get("HERALD_LOG_LEVEL"))
        return cls(
            webhook_secret=secret,
            routing=routing,
            chat=chat,
            dedup_capacity=_parse_positive_int("HERALD_DEDUP_CAPACITY", 1024),
            message_format=_parse_choice(
                "HERALD_MESSAGE_FORMAT", MessageFormat, MessageFormat.TEXT
            ),
            host=_read("HERALD_HOST") or "0.0.0.0",  # noqa: S104
            port=_parse_port(),
            log_level=level,
        )


__all__ = [
    "DEFAULT_LOGIN_URL",
    "BackpressurePolicy",
    "ChatConfig",
    "ConfigurationError",
    "MessageFormat",
    "RelayConfig",
]
