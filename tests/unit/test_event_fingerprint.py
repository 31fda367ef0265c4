"""Unit tests for event fingerprints."""

from __future__ import annotations

import msgspec

from herald.events import IssueEvent, PushEvent, make_fingerprint


def _issue(**overrides: object) -> IssueEvent:
    event = IssueEvent(
        repository="org/repo",
        actor="octocat",
        summary="Crash on start",
        event_id="7",
        revision="opened:2025-01-15T10:00:00Z",
        number=7,
        action="opened",
    )
    return msgspec.structs.replace(event, **overrides)


def test_fingerprint_is_deterministic() -> None:
    """Equal events hash to the same fingerprint."""
    assert make_fingerprint(_issue()) == make_fingerprint(_issue())


def test_fingerprint_ignores_presentation_fields() -> None:
    """Actor and summary do not affect identity."""
    edited = _issue(actor="someone-else", summary="Different title")
    assert make_fingerprint(edited) == make_fingerprint(_issue())


def test_repository_case_is_ignored() -> None:
    """GitHub repository names are case-insensitive."""
    assert make_fingerprint(_issue(repository="Org/Repo")) == make_fingerprint(
        _issue()
    )


def test_revision_changes_fingerprint() -> None:
    """A later action on the same object is a new occurrence."""
    closed = _issue(revision="closed:2025-01-16T10:00:00Z", action="closed")
    assert make_fingerprint(closed) != make_fingerprint(_issue())


def test_kind_changes_fingerprint() -> None:
    """Different event kinds never collide on shared identifiers."""
    push = PushEvent(
        repository="org/repo",
        actor="octocat",
        summary="Crash on start",
        event_id="7",
        revision="opened:2025-01-15T10:00:00Z",
    )
    assert make_fingerprint(push) != make_fingerprint(_issue())


def test_separators_in_fields_cannot_collide() -> None:
    """Shifting text between fields changes the fingerprint."""
    left = _issue(event_id="7|x", revision="y")
    right = _issue(event_id="7", revision="x|y")
    assert make_fingerprint(left) != make_fingerprint(right)
