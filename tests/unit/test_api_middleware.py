"""Unit tests for herald.api.middleware.ChatSessionLifespan.

Usage
-----
Run with pytest::

    pytest tests/unit/test_api_middleware.py

"""

from __future__ import annotations

from unittest import mock

import falcon.asgi
import falcon.testing
import pytest

from herald.api.health.resources import HealthResource
from herald.api.middleware import ChatSessionLifespan
from tests.helpers.femtologging_capture import capture_femto_logs


class _MockSession:
    """Lightweight mock of a ChatSessionManager for lifespan tests."""

    def __init__(self) -> None:
        self.desired_rooms = ("dev", "ops")
        self.start = mock.MagicMock()
        self.close = mock.AsyncMock()


@pytest.fixture
def session() -> _MockSession:
    """Provide a fresh mock session for each test."""
    return _MockSession()


@pytest.fixture
def app(session: _MockSession) -> falcon.asgi.App:
    """Build an app with the lifespan middleware installed."""
    mw = ChatSessionLifespan(session)  # type: ignore[arg-type]
    app = falcon.asgi.App(middleware=[mw])  # type: ignore[no-matching-overload]  # Falcon stubs
    app.add_route("/health", HealthResource())
    return app


class TestLifespan:
    """Middleware ties the chat session to the server lifespan."""

    @pytest.mark.asyncio
    async def test_session_started_on_startup(
        self, app: falcon.asgi.App, session: _MockSession
    ) -> None:
        """The session driver starts before the first request is served."""
        async with falcon.testing.ASGIConductor(app) as conductor:
            session.start.assert_called_once_with()
            result = await conductor.simulate_get("/health")
            assert result.status == falcon.HTTP_200, "app should serve requests"
            session.close.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_session_closed_on_shutdown(
        self, app: falcon.asgi.App, session: _MockSession
    ) -> None:
        """The session is closed when the server shuts down."""
        async with falcon.testing.ASGIConductor(app):
            pass

        session.close.assert_awaited_once_with()

    @pytest.mark.asyncio
    async def test_startup_is_logged(
        self, app: falcon.asgi.App, session: _MockSession
    ) -> None:
        """Startup logs the rooms the session will join."""
        with capture_femto_logs("herald.api.middleware") as capture:
            async with falcon.testing.ASGIConductor(app):
                pass
            capture.wait_for_count(2)

        assert capture.messages_containing("rooms=dev,ops"), (
            "expected startup log to list rooms"
        )
