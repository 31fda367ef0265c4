"""Validation rules for routing documents."""

from __future__ import annotations

import re
import typing as typ

if typ.TYPE_CHECKING:
    from .models import PatternFilter, RoutingDocument

REPO_SEGMENT_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")
ROOM_ID_PATTERN = re.compile(r"^[a-z0-9-]+$")


class RoutingValidationError(ValueError):
    """Raised when a routing document fails validation."""

    def __init__(self, issues: list[str]) -> None:
        """Keep every issue while presenting them as one message."""
        super().__init__("\n".join(issues))
        self.issues = issues


def to_room_id(room: str) -> str:
    """Return the canonical identifier for a room name.

    Examples
    --------
    >>> to_room_id("  Dev ")
    'dev'

    """
    return room.strip().lower()


def _validate_slug(slug: str, issues: list[str]) -> None:
    parts = slug.split("/")
    if len(parts) != 2 or not all(REPO_SEGMENT_PATTERN.match(part) for part in parts):
        issues.append(f"repository {slug!r} is not in 'owner/name' form")


def _validate_room(room: str, where: str, issues: list[str]) -> None:
    if not ROOM_ID_PATTERN.match(to_room_id(room)):
        issues.append(f"{where}: room {room!r} is not a valid room id")


def _validate_patterns(patterns: PatternFilter, where: str, issues: list[str]) -> None:
    for label, values in (("allow", patterns.allow), ("deny", patterns.deny)):
        for pattern in values:
            try:
                re.compile(pattern)
            except re.error as exc:
                issues.append(f"{where}.{label}: invalid pattern {pattern!r}: {exc}")


def validate_routing(document: RoutingDocument) -> RoutingDocument:
    """Validate ``document`` and return it unchanged when it is sound.

    Raises
    ------
    RoutingValidationError
        Listing every problem found, not just the first.

    """
    issues: list[str] = []

    if document.default_room is not None:
        _validate_room(document.default_room, "default_room", issues)

    seen: dict[str, str] = {}
    for slug, route in document.repositories.items():
        _validate_slug(slug, issues)
        previous = seen.setdefault(slug.lower(), slug)
        if previous != slug:
            issues.append(
                f"repositories {previous!r} and {slug!r} differ only by case"
            )
        for room in route.rooms:
            _validate_room(room, slug, issues)
        if route.secret is not None and not route.secret.strip():
            issues.append(f"{slug}: secret must not be empty when set")
        _validate_patterns(route.filters.branches, f"{slug}.filters.branches", issues)
        _validate_patterns(route.filters.actors, f"{slug}.filters.actors", issues)

    for login, alias in document.username_aliases.items():
        if not login.strip() or not alias.strip():
            issues.append(f"username alias {login!r} -> {alias!r} must be non-empty")

    if issues:
        raise RoutingValidationError(issues)
    return document


__all__ = ["RoutingValidationError", "to_room_id", "validate_routing"]
