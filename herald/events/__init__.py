"""Normalized GitHub events and their fingerprints."""

from __future__ import annotations

from .fingerprint import make_fingerprint
from .models import (
    CommitSummary,
    EventKind,
    IssueEvent,
    NormalizedEvent,
    PullRequestEvent,
    PushEvent,
    ReleaseEvent,
    event_kind,
)
from .normalizer import SUPPORTED_EVENT_TYPES, normalize, peek_repository

__all__ = [
    "SUPPORTED_EVENT_TYPES",
    "CommitSummary",
    "EventKind",
    "IssueEvent",
    "NormalizedEvent",
    "PullRequestEvent",
    "PushEvent",
    "ReleaseEvent",
    "event_kind",
    "make_fingerprint",
    "normalize",
    "peek_repository",
]
