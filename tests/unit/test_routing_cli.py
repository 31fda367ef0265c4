"""Routing CLI validation behaviour tests."""
# ruff: noqa: D103

from __future__ import annotations

from pathlib import Path  # noqa: TC003

import msgspec
import pytest

from herald.routing.cli import main


def test_cli_valid_routing_outputs_schema(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    routing = tmp_path / "routing.yaml"
    routing.write_text(
        """
default_room: lobby
repositories:
  org/repo:
    rooms: [dev, ops]
  org/other:
    rooms: [dev]
        """,
        encoding="utf-8",
    )
    schema_out = tmp_path / "out" / "schema.json"

    exit_code = main([str(routing), "--schema-out", str(schema_out)])

    assert exit_code == 0
    stdout = capsys.readouterr().out
    assert "is valid (2 repositories / 3 rooms)" in stdout
    schema = msgspec.json.decode(schema_out.read_bytes())
    assert "RoutingDocument" in schema["$defs"]


def test_cli_reports_validation_errors(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    invalid = tmp_path / "invalid.yaml"
    invalid.write_text(
        """
repositories:
  not-a-slug:
    rooms: ["bad room"]
        """,
        encoding="utf-8",
    )
    schema_out = tmp_path / "schema.json"

    exit_code = main([str(invalid), "--schema-out", str(schema_out)])

    assert exit_code == 1
    stdout = capsys.readouterr().out
    assert stdout.startswith(f"Routing validation failed for {invalid}:")
    assert "  - repository 'not-a-slug' is not in 'owner/name' form" in stdout
    assert "room 'bad room' is not a valid room id" in stdout
    assert not schema_out.exists()


def test_cli_reports_parse_errors(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    broken = tmp_path / "broken.yaml"
    broken.write_text("repositories: [unterminated\n", encoding="utf-8")

    assert main([str(broken)]) == 1
    assert "failed to parse YAML" in capsys.readouterr().out
