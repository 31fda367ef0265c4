"""Turn GitHub webhook payloads into normalized events.

The normalizer is total: it never raises for payload content. Unknown event
kinds, actions Herald does not announce, and payloads that fail to decode all
produce ``None``. GitHub sends many event kinds a repository hook may be
subscribed to, so an unrecognised kind is routine rather than an error.

Sender-controlled strings are copied verbatim. Escaping for the chat dialect
is the renderer's job.
"""

from __future__ import annotations

import collections.abc as cabc
import typing as typ

import msgspec

from .models import (
    CommitSummary,
    IssueEvent,
    NormalizedEvent,
    PullRequestEvent,
    PushEvent,
    ReleaseEvent,
)
from .schema import (
    Commit,
    IssuesPayload,
    PullRequestPayload,
    PushPayload,
    ReleasePayload,
    RepositoryProbe,
)

_BRANCH_REF_PREFIX = "refs/heads/"

RELAYED_PULL_REQUEST_ACTIONS = frozenset({"opened", "reopened", "closed"})
RELAYED_ISSUE_ACTIONS = frozenset({"opened", "reopened", "closed"})
RELAYED_RELEASE_ACTIONS = frozenset({"published"})

_PUSH_DECODER = msgspec.json.Decoder(PushPayload)
_PULL_REQUEST_DECODER = msgspec.json.Decoder(PullRequestPayload)
_ISSUES_DECODER = msgspec.json.Decoder(IssuesPayload)
_RELEASE_DECODER = msgspec.json.Decoder(ReleasePayload)
_PROBE_DECODER = msgspec.json.Decoder(RepositoryProbe)

RawPayload: typ.TypeAlias = bytes | str


def _first_line(text: str) -> str:
    return text.split("\n", 1)[0].strip()


def _commit_summary(commit: Commit) -> CommitSummary:
    return CommitSummary(
        sha=commit.id,
        message=commit.message,
        url=commit.url,
        author_name=commit.author.name,
        author_username=commit.author.username,
    )


def _normalize_push(raw: RawPayload) -> PushEvent | None:
    payload = _PUSH_DECODER.decode(raw)
    if payload.deleted or not payload.commits:
        return None
    if not payload.ref.startswith(_BRANCH_REF_PREFIX):
        # Tag pushes are announced through release events instead.
        return None

    head = payload.head_commit or payload.commits[-1]
    actor = payload.sender.login if payload.sender else payload.pusher.name
    return PushEvent(
        repository=payload.repository.full_name,
        actor=actor,
        summary=_first_line(head.message),
        event_id=payload.ref,
        revision=f"{payload.before}..{payload.after}",
        url=payload.compare or None,
        branch=payload.ref.removeprefix(_BRANCH_REF_PREFIX),
        repository_url=payload.repository.html_url or None,
        commits=tuple(_commit_summary(commit) for commit in payload.commits),
        forced=payload.forced,
        default_branch=payload.repository.default_branch,
    )


def _normalize_pull_request(raw: RawPayload) -> PullRequestEvent | None:
    payload = _PULL_REQUEST_DECODER.decode(raw)
    if payload.action not in RELAYED_PULL_REQUEST_ACTIONS:
        return None

    pull_request = payload.pull_request
    action = payload.action
    if action == "closed" and pull_request.merged:
        action = "merged"
    head_sha = pull_request.head.sha if pull_request.head else ""
    return PullRequestEvent(
        repository=payload.repository.full_name,
        actor=payload.sender.login,
        summary=_first_line(pull_request.title),
        event_id=str(pull_request.number),
        revision=f"{action}:{head_sha}:{pull_request.updated_at or ''}",
        url=pull_request.html_url or None,
        branch=pull_request.base.ref if pull_request.base else None,
        repository_url=payload.repository.html_url or None,
        number=pull_request.number,
        action=action,
    )


def _normalize_issue(raw: RawPayload) -> IssueEvent | None:
    payload = _ISSUES_DECODER.decode(raw)
    if payload.action not in RELAYED_ISSUE_ACTIONS:
        return None

    issue = payload.issue
    return IssueEvent(
        repository=payload.repository.full_name,
        actor=payload.sender.login,
        summary=_first_line(issue.title),
        event_id=str(issue.number),
        revision=f"{payload.action}:{issue.updated_at or ''}",
        url=issue.html_url or None,
        repository_url=payload.repository.html_url or None,
        number=issue.number,
        action=payload.action,
    )


def _normalize_release(raw: RawPayload) -> ReleaseEvent | None:
    payload = _RELEASE_DECODER.decode(raw)
    release = payload.release
    if payload.action not in RELAYED_RELEASE_ACTIONS or release.draft:
        return None

    return ReleaseEvent(
        repository=payload.repository.full_name,
        actor=payload.sender.login,
        summary=_first_line(release.name or release.tag_name),
        event_id=str(release.id),
        revision=payload.action,
        url=release.html_url or None,
        repository_url=payload.repository.html_url or None,
        tag_name=release.tag_name,
        prerelease=release.prerelease,
    )


_Extractor: typ.TypeAlias = cabc.Callable[[RawPayload], NormalizedEvent | None]

_EXTRACTORS: cabc.Mapping[str, _Extractor] = {
    "push": _normalize_push,
    "pull_request": _normalize_pull_request,
    "issues": _normalize_issue,
    "release": _normalize_release,
}

SUPPORTED_EVENT_TYPES = frozenset(_EXTRACTORS)


def normalize(
    event_type: str | None, payload_json: RawPayload
) -> NormalizedEvent | None:
    """Normalize one webhook payload, or return None when it is not relayed.

    Parameters
    ----------
    event_type : str | None
        Value of the ``X-GitHub-Event`` header.
    payload_json : bytes | str
        Raw JSON body of the delivery.

    Returns
    -------
    NormalizedEvent | None
        The event to relay, or ``None`` for unsupported kinds, ignored
        actions and malformed payloads.

    """
    extractor = _EXTRACTORS.get((event_type or "").strip().lower())
    if extractor is None:
        return None
    try:
        return extractor(payload_json)
    except msgspec.DecodeError:
        return None


def peek_repository(payload_json: RawPayload) -> str | None:
    """Return ``repository.full_name`` from a payload without validating the rest."""
    try:
        return _PROBE_DECODER.decode(payload_json).repository.full_name
    except msgspec.DecodeError:
        return None


__all__ = [
    "RELAYED_ISSUE_ACTIONS",
    "RELAYED_PULL_REQUEST_ACTIONS",
    "RELAYED_RELEASE_ACTIONS",
    "SUPPORTED_EVENT_TYPES",
    "normalize",
    "peek_repository",
]
