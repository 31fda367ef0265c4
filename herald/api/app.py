"""Application factory for the Herald Falcon ASGI application.

This module provides ``create_app()`` which builds and configures the
Falcon ASGI application with health endpoints and, when relay
dependencies are available, the GitHub webhook endpoint.

Usage
-----
Create a health-only app::

    app = create_app()

Create a full relay app::

    from herald.api.app import AppDependencies, create_app

    deps = AppDependencies(dispatcher=dispatcher, session=session)
    app = create_app(deps)

"""

from __future__ import annotations

import dataclasses as dc
import typing as typ

import falcon.asgi

from herald.api.health.resources import HealthResource, ReadyResource

if typ.TYPE_CHECKING:
    from herald.chat import ChatSessionManager
    from herald.dispatcher import Dispatcher

__all__ = ["WEBHOOK_ROUTE", "AppDependencies", "create_app"]

WEBHOOK_ROUTE = "/github/callback"


@dc.dataclass(frozen=True, slots=True)
class AppDependencies:
    """Dependencies for the Falcon ASGI application.

    Attributes
    ----------
    dispatcher
        Relay pipeline. When set, ``POST /github/callback`` is registered.
    session
        Chat session. When set, its lifetime follows the server's and
        ``/ready`` reports its state.

    """

    dispatcher: Dispatcher | None = None
    session: ChatSessionManager | None = None


def create_app(
    dependencies: AppDependencies | None = None,
) -> falcon.asgi.App:
    """Create and configure the Falcon ASGI application.

    Parameters
    ----------
    dependencies
        Optional application dependencies. When ``None``, only health
        endpoints are available.

    Returns
    -------
    falcon.asgi.App
        Configured Falcon ASGI application.

    """
    deps = dependencies or AppDependencies()
    middleware: list[object] = []

    if deps.session is not None:
        from herald.api.middleware import ChatSessionLifespan

        middleware.append(ChatSessionLifespan(deps.session))

    app = falcon.asgi.App(middleware=middleware)  # type: ignore[no-matching-overload]  # Falcon stubs

    app.add_route("/health", HealthResource())
    app.add_route("/ready", ReadyResource(deps.session))

    if deps.dispatcher is not None:
        from herald.webhook.resources import WebhookResource

        app.add_route(WEBHOOK_ROUTE, WebhookResource(deps.dispatcher))

    return app
