"""Normalized repository events relayed to chat.

Each supported GitHub event kind maps to exactly one variant of the
:data:`NormalizedEvent` tagged union. Variants are immutable ``msgspec``
structs; the ``kind`` tag doubles as the template key used by the renderer.

Every variant carries ``event_id`` and ``revision``. Together with the kind
and repository they identify one relayable occurrence: GitHub redeliveries
repeat them exactly, while a later action on the same object changes the
revision.
"""

from __future__ import annotations

import typing as typ

import msgspec


class CommitSummary(msgspec.Struct, frozen=True, kw_only=True):
    """One commit carried by a push.

    Attributes
    ----------
    sha : str
        Full commit SHA.
    message : str
        Complete commit message, possibly multi-line.
    url : str
        Commit page on GitHub.
    author_name : str
        Git author name.
    author_username : str, optional
        GitHub login of the author when GitHub could resolve one.

    """

    sha: str
    message: str
    url: str = ""
    author_name: str = ""
    author_username: str | None = None

    @property
    def short_sha(self) -> str:
        """Return the abbreviated SHA shown in chat."""
        return self.sha[:6]

    @property
    def title(self) -> str:
        """Return the first line of the commit message."""
        return self.message.split("\n", 1)[0]


class _EventBase(
    msgspec.Struct,
    frozen=True,
    kw_only=True,
    tag_field="kind",
):
    """Fields shared by every normalized event."""

    repository: str
    actor: str
    summary: str
    event_id: str
    revision: str
    url: str | None = None
    branch: str | None = None
    repository_url: str | None = None


class PushEvent(_EventBase, tag="push", frozen=True, kw_only=True):
    """Commits pushed to a branch."""

    commits: tuple[CommitSummary, ...] = ()
    forced: bool = False
    default_branch: str | None = None

    @property
    def commit_count(self) -> int:
        """Return the number of commits in the push."""
        return len(self.commits)


class PullRequestEvent(
    _EventBase, tag="pull_request", frozen=True, kw_only=True
):
    """A pull request was opened, reopened, closed or merged."""

    number: int
    action: str


class IssueEvent(_EventBase, tag="issue", frozen=True, kw_only=True):
    """An issue was opened, reopened or closed."""

    number: int
    action: str


class ReleaseEvent(_EventBase, tag="release", frozen=True, kw_only=True):
    """A release was published."""

    tag_name: str
    prerelease: bool = False


NormalizedEvent: typ.TypeAlias = (
    PushEvent | PullRequestEvent | IssueEvent | ReleaseEvent
)

EventKind: typ.TypeAlias = typ.Literal["push", "pull_request", "issue", "release"]


def event_kind(event: NormalizedEvent) -> EventKind:
    """Return the tag of ``event``'s variant."""
    return typ.cast("EventKind", event.__struct_config__.tag)


__all__ = [
    "CommitSummary",
    "EventKind",
    "IssueEvent",
    "NormalizedEvent",
    "PullRequestEvent",
    "PushEvent",
    "ReleaseEvent",
    "event_kind",
]
