"""Lifespan middleware tying the chat session to the ASGI server.

The chat session's driver task must live on the server's event loop, so it
is started from the ASGI lifespan ``startup`` event and closed on
``shutdown``.

Usage
-----
Register the middleware when creating the Falcon app::

    from herald.api.middleware import ChatSessionLifespan

    app = falcon.asgi.App(middleware=[ChatSessionLifespan(session)])

"""

from __future__ import annotations

import typing as typ

from herald.logging import get_logger, log_info

if typ.TYPE_CHECKING:
    from herald.chat import ChatSessionManager

__all__ = ["ChatSessionLifespan"]

logger = get_logger(__name__)


class ChatSessionLifespan:
    """Falcon middleware starting and stopping a chat session.

    Parameters
    ----------
    session
        Session to drive for the lifetime of the application.

    """

    def __init__(self, session: ChatSessionManager) -> None:
        """Initialize the middleware with the session it manages."""
        self._session = session

    async def process_startup(
        self, _scope: dict[str, typ.Any], _event: object
    ) -> None:
        """Start the session driver when the server starts."""
        self._session.start()
        log_info(
            logger,
            "Chat session started (rooms=%s)",
            ",".join(self._session.desired_rooms),
        )

    async def process_shutdown(
        self, _scope: dict[str, typ.Any], _event: object
    ) -> None:
        """Close the session when the server stops."""
        await self._session.close()
        log_info(logger, "Chat session closed")
