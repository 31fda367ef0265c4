"""Typed subsets of GitHub webhook payloads.

Only the fields Herald reads are declared; msgspec ignores everything else,
so additions to GitHub's payloads never break decoding. A payload that lacks
a declared required field, or carries one with the wrong type, fails to
decode and is treated as an event Herald does not relay.
"""

from __future__ import annotations

import msgspec


class Account(msgspec.Struct, kw_only=True):
    """GitHub user or bot account (``sender``, ``user``)."""

    login: str


class RepositoryRef(msgspec.Struct, kw_only=True):
    """Minimal repository shape used to choose the verification secret."""

    full_name: str


class RepositoryProbe(msgspec.Struct, kw_only=True):
    """Envelope decoded before verification to find the repository."""

    repository: RepositoryRef


class Repository(msgspec.Struct, kw_only=True):
    """Repository block shared by every event payload."""

    full_name: str
    name: str = ""
    html_url: str = ""
    default_branch: str | None = None


class Pusher(msgspec.Struct, kw_only=True):
    """The account that performed a push."""

    name: str


class CommitAuthor(msgspec.Struct, kw_only=True):
    """Git author of a pushed commit."""

    name: str = ""
    username: str | None = None


class Commit(msgspec.Struct, kw_only=True):
    """A commit listed in a push payload."""

    id: str
    message: str
    url: str = ""
    author: CommitAuthor = msgspec.field(default_factory=CommitAuthor)


class PushPayload(msgspec.Struct, kw_only=True):
    """``push`` event payload."""

    ref: str
    after: str
    before: str = ""
    forced: bool = False
    deleted: bool = False
    compare: str = ""
    commits: list[Commit] = msgspec.field(default_factory=list)
    head_commit: Commit | None = None
    pusher: Pusher
    repository: Repository
    sender: Account | None = None


class GitRef(msgspec.Struct, kw_only=True):
    """Base or head reference of a pull request."""

    ref: str
    sha: str = ""


class PullRequest(msgspec.Struct, kw_only=True):
    """Pull request object inside a ``pull_request`` payload."""

    number: int
    title: str
    html_url: str = ""
    merged: bool | None = None
    updated_at: str | None = None
    base: GitRef | None = None
    head: GitRef | None = None


class PullRequestPayload(msgspec.Struct, kw_only=True):
    """``pull_request`` event payload."""

    action: str
    pull_request: PullRequest
    repository: Repository
    sender: Account


class Issue(msgspec.Struct, kw_only=True):
    """Issue object inside an ``issues`` payload."""

    number: int
    title: str
    html_url: str = ""
    updated_at: str | None = None


class IssuesPayload(msgspec.Struct, kw_only=True):
    """``issues`` event payload."""

    action: str
    issue: Issue
    repository: Repository
    sender: Account


class Release(msgspec.Struct, kw_only=True):
    """Release object inside a ``release`` payload."""

    id: int
    tag_name: str
    name: str | None = None
    html_url: str = ""
    draft: bool = False
    prerelease: bool = False


class ReleasePayload(msgspec.Struct, kw_only=True):
    """``release`` event payload."""

    action: str
    release: Release
    repository: Repository
    sender: Account
