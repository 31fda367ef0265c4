"""Chat session errors.

Every failure raised below the session manager is one of these types; the
manager treats them all as a reason to disconnect and retry, never as fatal.
"""

from __future__ import annotations

_RESPONSE_PREVIEW_LIMIT = 100


class ChatError(Exception):
    """Base exception for chat session failures."""


class ChatTransportError(ChatError):
    """Raised when the connection to the chat server fails or is lost.

    Attributes
    ----------
    timed_out
        True when the failure was a connect or idle timeout.

    """

    def __init__(self, message: str, *, timed_out: bool = False) -> None:
        """Initialise with a message and whether a timeout caused it."""
        self.timed_out = timed_out
        super().__init__(message)

    @classmethod
    def connect_failed(cls, url: str, detail: str) -> ChatTransportError:
        """Return an error for a connection attempt that failed outright."""
        return cls(f"could not connect to {url}: {detail}")

    @classmethod
    def connect_timeout(cls, url: str, seconds: float) -> ChatTransportError:
        """Return an error for a connection attempt that took too long."""
        return cls(f"connecting to {url} timed out after {seconds:g}s", timed_out=True)

    @classmethod
    def connection_lost(cls, detail: str) -> ChatTransportError:
        """Return an error for a connection closed by the server or network."""
        return cls(f"connection lost: {detail}")

    @classmethod
    def idle_timeout(cls, seconds: float) -> ChatTransportError:
        """Return an error for a connection that went quiet for too long."""
        return cls(f"no frames received for {seconds:g}s", timed_out=True)


class ChatLoginError(ChatError):
    """Raised when the login handshake fails.

    Attributes
    ----------
    status_code
        HTTP status code from the login server, if one was received.
    timed_out
        True when the handshake did not finish in time.

    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        timed_out: bool = False,
    ) -> None:
        """Initialise with a message, HTTP status code and timeout flag."""
        self.status_code = status_code
        self.timed_out = timed_out
        super().__init__(message)

    @classmethod
    def rejected(cls, username: str, detail: str) -> ChatLoginError:
        """Return an error for credentials the server refused."""
        return cls(f"login as {username!r} rejected: {detail}")

    @classmethod
    def http_error(cls, status_code: int) -> ChatLoginError:
        """Return an error for a non-2xx login server response."""
        return cls(f"login server HTTP {status_code}", status_code=status_code)

    @classmethod
    def network_error(cls, detail: str) -> ChatLoginError:
        """Return an error for a login server that could not be reached."""
        return cls(f"login server unreachable: {detail}")

    @classmethod
    def timeout(cls, seconds: float) -> ChatLoginError:
        """Return an error for a handshake that did not finish in time."""
        return cls(f"login did not complete within {seconds:g}s", timed_out=True)

    @classmethod
    def invalid_response(cls, body: str) -> ChatLoginError:
        """Return an error for a login server reply that cannot be parsed."""
        preview = body[:_RESPONSE_PREVIEW_LIMIT]
        return cls(f"unexpected login server response: {preview!r}")


__all__ = ["ChatError", "ChatLoginError", "ChatTransportError"]
