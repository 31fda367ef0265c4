"""Command-line helpers for routing document validation and schema export."""

from __future__ import annotations

import argparse
import json
from pathlib import Path

import msgspec

from .loader import load_routing
from .models import RoutingDocument
from .table import RoutingTable
from .validation import RoutingValidationError


def write_routing_schema(path: Path) -> Path:
    """Persist the JSON Schema for routing documents, creating parent directories."""
    schema = msgspec.json.schema(RoutingDocument)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(schema, indent=2), encoding="utf-8")
    return path


def main(argv: list[str] | None = None) -> int:
    """Validate a routing file and optionally export its JSON Schema.

    Parameters
    ----------
    argv : list[str] | None, optional
        Command-line arguments. ``None`` defaults to ``sys.argv``.

    Returns
    -------
    int
        Exit code: 0 on success, 1 when validation fails.

    """
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("routing", type=Path, help="YAML routing file to validate")
    parser.add_argument(
        "--schema-out",
        type=Path,
        default=None,
        help="Optional path to write the generated JSON Schema",
    )
    args = parser.parse_args(argv)

    routing_path: Path = args.routing
    try:
        document = load_routing(routing_path)
    except RoutingValidationError as exc:
        print(f"Routing validation failed for {routing_path}:")
        for issue in exc.issues:
            print(f"  - {issue}")
        return 1

    if args.schema_out:
        write_routing_schema(args.schema_out)

    table = RoutingTable.from_document(document)
    print(
        f"routing {routing_path} is valid "
        f"({len(table.routes)} repositories / {len(table.all_rooms())} rooms)"
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
