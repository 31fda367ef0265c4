"""Loaders for routing documents."""

from __future__ import annotations

from pathlib import Path

import msgspec
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from .models import RoutingDocument
from .validation import RoutingValidationError, validate_routing

YAML_VERSION = (1, 2)


def load_routing(path: Path | str) -> RoutingDocument:
    """Parse and validate a YAML (or JSON, a YAML subset) routing file."""
    path_obj = Path(path)
    try:
        loaded = _yaml().load(path_obj.read_text(encoding="utf-8"))
    except (OSError, YAMLError) as exc:
        raise RoutingValidationError([f"failed to parse YAML: {exc}"]) from exc

    if loaded is None:
        raise RoutingValidationError(["routing file is empty"])
    return _convert(loaded)


def parse_routing_json(text: str) -> RoutingDocument:
    """Parse and validate an inline JSON routing document."""
    try:
        document = msgspec.json.decode(text.encode("utf-8"), type=RoutingDocument)
    except msgspec.ValidationError as exc:
        raise RoutingValidationError([f"schema validation failed: {exc}"]) from exc
    except msgspec.DecodeError as exc:
        raise RoutingValidationError([f"failed to parse JSON: {exc}"]) from exc
    return validate_routing(document)


def _convert(loaded: object) -> RoutingDocument:
    try:
        document = msgspec.convert(loaded, type=RoutingDocument)
    except msgspec.ValidationError as exc:
        raise RoutingValidationError([f"schema validation failed: {exc}"]) from exc
    return validate_routing(document)


def _yaml() -> YAML:
    yaml = YAML(typ="safe")
    yaml.version = YAML_VERSION
    yaml.allow_duplicate_keys = False
    return yaml


__all__ = ["load_routing", "parse_routing_json"]
