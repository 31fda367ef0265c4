"""Unit tests for herald.api.app application factory.

Usage
-----
Run with pytest::

    pytest tests/unit/test_api_app.py

"""

from __future__ import annotations

from unittest import mock

import falcon.asgi
import falcon.testing
import pytest

from herald.api.app import WEBHOOK_ROUTE, AppDependencies, create_app
from herald.chat import ConnectionState
from herald.dispatcher import DeliveryOutcome, DispatchResult


class _StubSession:
    """Chat session stand-in exposing only what the app reads."""

    def __init__(self, state: ConnectionState) -> None:
        self.state = state
        self.desired_rooms = ("dev",)
        self.start = mock.MagicMock()
        self.close = mock.AsyncMock()


@pytest.fixture
def deps() -> AppDependencies:
    """Build AppDependencies with a mock dispatcher and a ready session."""
    dispatcher = mock.MagicMock()
    dispatcher.dispatch = mock.AsyncMock(
        return_value=DispatchResult(DeliveryOutcome.IGNORED)
    )
    return AppDependencies(
        dispatcher=dispatcher,
        session=_StubSession(ConnectionState.READY),  # type: ignore[arg-type]
    )


@pytest.fixture
def health_client() -> falcon.testing.TestClient:
    """Build a test client for health-only mode."""
    return falcon.testing.TestClient(create_app())


@pytest.fixture
def full_client(deps: AppDependencies) -> falcon.testing.TestClient:
    """Build a test client with relay dependencies."""
    return falcon.testing.TestClient(create_app(deps))


class TestCreateAppHealthOnly:
    """Tests for create_app() without relay dependencies."""

    def test_returns_falcon_app(self) -> None:
        """Create_app() returns a Falcon ASGI App."""
        app = create_app()
        assert isinstance(app, falcon.asgi.App), "expected Falcon ASGI App"

    def test_has_health_route(self, health_client: falcon.testing.TestClient) -> None:
        """Health-only app responds to /health."""
        result = health_client.simulate_get("/health")
        assert result.status == falcon.HTTP_200, "expected HTTP 200 from /health"
        assert result.json == {"status": "ok"}, "wrong /health body"

    def test_has_ready_route(self, health_client: falcon.testing.TestClient) -> None:
        """Health-only app responds to /ready."""
        result = health_client.simulate_get("/ready")
        assert result.status == falcon.HTTP_200, "expected HTTP 200 from /ready"
        assert result.json == {"status": "ready"}, "wrong /ready body"

    def test_webhook_endpoint_not_registered(
        self, health_client: falcon.testing.TestClient
    ) -> None:
        """Without a dispatcher, the webhook endpoint returns 404."""
        result = health_client.simulate_post(WEBHOOK_ROUTE, body=b"{}")
        assert result.status == falcon.HTTP_404, "expected HTTP 404"


class TestCreateAppWithDeps:
    """Tests for create_app() with relay dependencies."""

    def test_returns_falcon_app(self, deps: AppDependencies) -> None:
        """Create_app(deps) returns a Falcon ASGI App."""
        app = create_app(deps)
        assert isinstance(app, falcon.asgi.App), "expected Falcon ASGI App"

    def test_has_health_route(self, full_client: falcon.testing.TestClient) -> None:
        """Full app still responds to /health."""
        result = full_client.simulate_get("/health")
        assert result.status == falcon.HTTP_200, "expected HTTP 200 from /health"

    def test_ready_reports_chat_state(
        self, full_client: falcon.testing.TestClient
    ) -> None:
        """A ready chat session makes /ready succeed."""
        result = full_client.simulate_get("/ready")
        assert result.status == falcon.HTTP_200, "expected HTTP 200 from /ready"
        assert result.json == {"status": "ready", "chat": "ready"}

    def test_webhook_endpoint_registered(
        self, full_client: falcon.testing.TestClient
    ) -> None:
        """With a dispatcher, the webhook endpoint is registered (not 404)."""
        result = full_client.simulate_post(WEBHOOK_ROUTE, body=b"{}")
        assert result.status != falcon.HTTP_404, "route should be registered"


@pytest.mark.parametrize(
    "state",
    [
        ConnectionState.DISCONNECTED,
        ConnectionState.CONNECTING,
        ConnectionState.LOGGING_IN,
    ],
)
def test_ready_fails_until_chat_is_ready(state: ConnectionState) -> None:
    """/ready answers 503 with the chat state while the session is not ready."""
    app = create_app(
        AppDependencies(session=_StubSession(state))  # type: ignore[arg-type]
    )

    result = falcon.testing.TestClient(app).simulate_get("/ready")

    assert result.status == falcon.HTTP_503, "expected HTTP 503 from /ready"
    assert result.json == {"status": "not_ready", "chat": state.value}
