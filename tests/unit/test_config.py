"""Unit tests for environment configuration."""

from __future__ import annotations

import typing as typ

import pytest

from herald.config import (
    DEFAULT_LOGIN_URL,
    BackpressurePolicy,
    ConfigurationError,
    MessageFormat,
    RelayConfig,
)

if typ.TYPE_CHECKING:
    from pathlib import Path

pytestmark = pytest.mark.usefixtures("herald_env")


def test_minimal_environment() -> None:
    """Required variables alone produce a working configuration."""
    config = RelayConfig.from_env()

    assert config.chat.server_url == "wss://chat.test/showdown/websocket"
    assert config.chat.username == "Herald Bot"
    assert config.chat.password == ""
    assert config.chat.login_url == DEFAULT_LOGIN_URL
    assert config.chat.send_interval == pytest.approx(0.7)
    assert config.chat.backpressure is BackpressurePolicy.DROP
    assert config.webhook_secret == "s3cret"
    assert config.all_rooms() == ("dev",)
    assert config.rooms_for("any/repo") == ("dev",)
    assert config.message_format is MessageFormat.TEXT
    assert (config.host, config.port) == ("0.0.0.0", 8080)  # noqa: S104
    assert config.dedup_capacity == 1024


def test_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    """Optional variables override defaults."""
    monkeypatch.setenv("HERALD_PASSWORD", "hunter2")
    monkeypatch.setenv("HERALD_SEND_INTERVAL_MS", "250")
    monkeypatch.setenv("HERALD_OUTBOUND_QUEUE_SIZE", "5")
    monkeypatch.setenv("HERALD_BACKPRESSURE", "Block")
    monkeypatch.setenv("HERALD_MESSAGE_FORMAT", "html")
    monkeypatch.setenv("HERALD_DEDUP_CAPACITY", "64")
    monkeypatch.setenv("HERALD_PORT", "9000")
    monkeypatch.setenv("HERALD_LOG_LEVEL", "debug")

    config = RelayConfig.from_env()

    assert config.chat.password == "hunter2"
    assert config.chat.send_interval == pytest.approx(0.25)
    assert config.chat.queue_size == 5
    assert config.chat.backpressure is BackpressurePolicy.BLOCK
    assert config.message_format is MessageFormat.HTML
    assert config.dedup_capacity == 64
    assert config.port == 9000
    assert config.log_level == "DEBUG"


@pytest.mark.parametrize(
    "env_var", ["HERALD_SERVER_URL", "HERALD_USER", "HERALD_WEBHOOK_SECRET"]
)
def test_required_variables(monkeypatch: pytest.MonkeyPatch, env_var: str) -> None:
    """Each required variable is reported by name when missing."""
    monkeypatch.delenv(env_var)

    with pytest.raises(ConfigurationError, match=f"{env_var} must be set"):
        RelayConfig.from_env()


@pytest.mark.parametrize(
    ("env_var", "value", "fragment"),
    [
        ("HERALD_SEND_INTERVAL_MS", "fast", "expected an integer"),
        ("HERALD_OUTBOUND_QUEUE_SIZE", "0", "must be positive"),
        ("HERALD_BACKPRESSURE", "wait", "expected one of drop, block"),
        ("HERALD_MESSAGE_FORMAT", "markdown", "expected one of text, html"),
        ("HERALD_PORT", "70000", "outside valid range"),
        ("HERALD_DEFAULT_ROOM", "no spaces", "not a valid room id"),
    ],
)
def test_invalid_values(
    monkeypatch: pytest.MonkeyPatch, env_var: str, value: str, fragment: str
) -> None:
    """Unusable values name the variable and the problem."""
    monkeypatch.setenv(env_var, value)

    with pytest.raises(ConfigurationError, match=f"{env_var} is invalid") as excinfo:
        RelayConfig.from_env()

    assert fragment in str(excinfo.value)


def test_no_rooms_is_an_error(monkeypatch: pytest.MonkeyPatch) -> None:
    """Without a default room or routing document there is nowhere to post."""
    monkeypatch.delenv("HERALD_DEFAULT_ROOM")

    with pytest.raises(ConfigurationError, match="no rooms configured"):
        RelayConfig.from_env()


def test_routing_file(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """A routing file supplies routes, secrets and aliases."""
    routing = tmp_path / "routing.yaml"
    routing.write_text(
        "repositories:\n"
        "  org/repo:\n"
        "    rooms: [ops]\n"
        "    secret: repo-secret\n",
        encoding="utf-8",
    )
    monkeypatch.setenv("HERALD_ROUTING_PATH", str(routing))

    config = RelayConfig.from_env()

    assert config.rooms_for("org/repo") == ("ops",)
    assert config.rooms_for("org/other") == ("dev",)
    assert config.secret_for("org/repo") == "repo-secret"
    assert config.secret_for("org/other") == "s3cret"
    assert config.secret_for(None) == "s3cret"
    assert config.all_rooms() == ("ops", "dev")


def test_inline_routing_json(monkeypatch: pytest.MonkeyPatch) -> None:
    """Routing may be supplied inline as JSON."""
    monkeypatch.delenv("HERALD_DEFAULT_ROOM")
    monkeypatch.setenv(
        "HERALD_ROUTING_JSON", '{"repositories": {"org/repo": {"rooms": ["dev"]}}}'
    )

    config = RelayConfig.from_env()

    assert config.rooms_for("org/repo") == ("dev",)
    assert config.rooms_for("org/other") == ()


def test_invalid_routing_is_a_configuration_error(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """Routing validation failures are reported against their variable."""
    monkeypatch.setenv("HERALD_ROUTING_JSON", '{"repositories": {"bad": {}}}')

    with pytest.raises(ConfigurationError, match="HERALD_ROUTING_JSON is invalid"):
        RelayConfig.from_env()


def test_both_routing_sources_conflict(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    """Only one routing source may be configured."""
    monkeypatch.setenv("HERALD_ROUTING_PATH", str(tmp_path / "routing.yaml"))
    monkeypatch.setenv("HERALD_ROUTING_JSON", "{}")

    with pytest.raises(ConfigurationError, match="set only one of"):
        RelayConfig.from_env()
