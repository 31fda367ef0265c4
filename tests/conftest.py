"""Shared fixtures for unit and feature tests."""

from __future__ import annotations

import os

import pytest

from herald.config import RelayConfig
from herald.routing import RepositoryRoute, RoutingDocument, RoutingTable
from tests.helpers.fake_chat import RecordingSink, chat_config
from tests.helpers.github_payloads import DEFAULT_SECRET

_REQUIRED_ENV = {
    "HERALD_SERVER_URL": "wss://chat.test/showdown/websocket",
    "HERALD_USER": "Herald Bot",
    "HERALD_WEBHOOK_SECRET": DEFAULT_SECRET,
    "HERALD_DEFAULT_ROOM": "dev",
}


@pytest.fixture
def sink() -> RecordingSink:
    """Provide a sink that accepts every message."""
    return RecordingSink()


@pytest.fixture
def routing_table() -> RoutingTable:
    """Route ``org/repo`` to ``dev`` with no filters and no default room."""
    document = RoutingDocument(
        repositories={"org/repo": RepositoryRoute(rooms=["dev"])},
    )
    return RoutingTable.from_document(document)


@pytest.fixture
def relay_config(routing_table: RoutingTable) -> RelayConfig:
    """Provide relay configuration around ``routing_table``."""
    return RelayConfig(
        webhook_secret=DEFAULT_SECRET,
        routing=routing_table,
        chat=chat_config(),
        dedup_capacity=16,
    )


@pytest.fixture
def herald_env(monkeypatch: pytest.MonkeyPatch) -> dict[str, str]:
    """Clear ``HERALD_*`` variables and set the minimum needed to start."""
    for key in list(os.environ):
        if key.startswith("HERALD_"):
            monkeypatch.delenv(key)
    for key, value in _REQUIRED_ENV.items():
        monkeypatch.setenv(key, value)
    return dict(_REQUIRED_ENV)
