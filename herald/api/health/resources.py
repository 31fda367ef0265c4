"""Health check resources for liveness and readiness checks.

``/health`` reports that the process is alive. ``/ready`` reports whether the
relay can deliver notifications: when a chat session is wired in, the check
fails until the session has logged in and is ready.

Usage
-----
Register health endpoints on the Falcon app::

    from herald.api.health.resources import HealthResource, ReadyResource

    app.add_route("/health", HealthResource())
    app.add_route("/ready", ReadyResource(session))

"""

from __future__ import annotations

import typing as typ
from http import HTTPStatus

from herald.chat import ConnectionState

if typ.TYPE_CHECKING:
    from falcon.asgi import Request, Response

    from herald.chat import ChatSessionManager

__all__ = ["HealthResource", "ReadyResource"]


class HealthResource:
    """Liveness check resource returning ``{"status": "ok"}``."""

    async def on_get(self, _req: Request, resp: Response) -> None:
        """Handle GET /health requests.

        Parameters
        ----------
        _req
            Falcon request (unused).
        resp
            Falcon response populated with liveness status.

        """
        resp.media = {"status": "ok"}
        resp.status = HTTPStatus.OK


class ReadyResource:
    """Readiness check reflecting the chat session state.

    Parameters
    ----------
    session
        Chat session to report on. Without one the check always succeeds.

    """

    def __init__(self, session: ChatSessionManager | None = None) -> None:
        """Bind the check to an optional chat session."""
        self._session = session

    async def on_get(self, _req: Request, resp: Response) -> None:
        """Handle GET /ready requests.

        Parameters
        ----------
        _req
            Falcon request (unused).
        resp
            Falcon response with ``200`` when ready and ``503`` otherwise.

        """
        if self._session is None:
            resp.media = {"status": "ready"}
            resp.status = HTTPStatus.OK
            return

        state = self._session.state
        if state is ConnectionState.READY:
            resp.media = {"status": "ready", "chat": state.value}
            resp.status = HTTPStatus.OK
        else:
            resp.media = {"status": "not_ready", "chat": state.value}
            resp.status = HTTPStatus.SERVICE_UNAVAILABLE
