"""Fixed message templates per event kind.

Text templates produce a single chat line; HTML templates produce an
``/addhtmlbox`` command. Every field taken from an event is escaped for the
target dialect here, so callers pass events through untouched.
"""

from __future__ import annotations

import collections.abc as cabc
import re
import typing as typ

from herald.events import (
    CommitSummary,
    IssueEvent,
    PullRequestEvent,
    PushEvent,
    ReleaseEvent,
)

from .escape import (
    MAX_MESSAGE_LENGTH,
    escape_html,
    escape_text,
    guard_command,
    single_line,
    suppress_highlights,
    truncate,
)

if typ.TYPE_CHECKING:
    from herald.events import NormalizedEvent

DisplayName: typ.TypeAlias = cabc.Callable[[str], str]

GITHUB_URL = "https://github.com"
_ISSUE_REFERENCE = re.compile(r"#([0-9]+)")


def _plural(count: int, noun: str) -> str:
    return f"{count} {noun}" if count == 1 else f"{count} {noun}s"


def _fit_line(head: str, summary: str, tail: str = "") -> str:
    """Join ``head: summary tail``, shortening the summary to fit one message."""
    escaped = escape_text(summary)
    # The command guard adds a prefix that counts against the limit.
    limit = MAX_MESSAGE_LENGTH - (len(guard_command(head)) - len(head))
    room_for_summary = limit - len(head) - len(tail) - 2
    line = f"{head}: {truncate(escaped, max(room_for_summary, 0))}{tail}"
    return guard_command(truncate(line, limit))


def _url_tail(url: str | None) -> str:
    return f" {single_line(url)}" if url else ""


def _push_text(event: PushEvent, display_name: DisplayName) -> str:
    verb = "force-pushed" if event.forced else "pushed"
    head = (
        f"{escape_text(display_name(event.actor))} {verb} "
        f"{_plural(event.commit_count, 'commit')} to "
        f"{escape_text(event.repository)} ({escape_text(event.branch or '')})"
    )
    return _fit_line(head, event.summary)


def _numbered_text(
    event: PullRequestEvent | IssueEvent, noun: str, display_name: DisplayName
) -> str:
    head = (
        f"{escape_text(display_name(event.actor))} {event.action} {noun} "
        f"#{event.number} in {escape_text(event.repository)}"
    )
    return _fit_line(head, event.summary, _url_tail(event.url))


def _release_text(event: ReleaseEvent, display_name: DisplayName) -> str:
    noun = "pre-release" if event.prerelease else "release"
    head = (
        f"{escape_text(display_name(event.actor))} published {noun} "
        f"{escape_text(event.tag_name)} in {escape_text(event.repository)}"
    )
    return _fit_line(head, event.summary, _url_tail(event.url))


def render_text(event: NormalizedEvent, display_name: DisplayName = str) -> str:
    """Render ``event`` as one plain-text chat line.

    Parameters
    ----------
    event : NormalizedEvent
        Event to describe.
    display_name : Callable[[str], str], optional
        Maps a GitHub login to the name shown in chat.

    Returns
    -------
    str
        A line of at most ``MAX_MESSAGE_LENGTH`` characters that cannot be
        read as a command.

    """
    match event:
        case PushEvent():
            return _push_text(event, display_name)
        case PullRequestEvent():
            return _numbered_text(event, "pull request", display_name)
        case IssueEvent():
            return _numbered_text(event, "issue", display_name)
        case ReleaseEvent():
            return _release_text(event, display_name)
    typ.assert_never(event)


def _repository_url(event: NormalizedEvent) -> str:
    return event.repository_url or f"{GITHUB_URL}/{event.repository}"


def _repository_tag(event: NormalizedEvent) -> str:
    name = event.repository.rsplit("/", 1)[-1]
    return (
        f"[<a href='{escape_html(_repository_url(event))}'>"
        f"<font color=FF00FF>{escape_html(name)}</font></a>]"
    )


def _user_link(login: str, display_name: DisplayName) -> str:
    return (
        f"<a href='{GITHUB_URL}/{escape_html(login)}'>"
        f"<font color='909090'>{escape_html(display_name(login))}</font></a>"
    )


def _link_issue_references(title: str, repository_url: str) -> str:
    issues_url = f"{escape_html(repository_url)}/issues"
    return _ISSUE_REFERENCE.sub(
        lambda match: f"<a href='{issues_url}/{match.group(1)}'>{match.group(0)}</a>",
        escape_html(title),
    )


def _commit_author(commit: CommitSummary, display_name: DisplayName) -> str:
    if commit.author_username is None:
        return f"<font color=909090>{escape_html(commit.author_name)}</font>"
    return (
        f'<span title="{escape_html(commit.author_name)}">'
        f"<font color=909090>{escape_html(display_name(commit.author_username))}"
        "</font></span>"
    )


def _commit_html(
    commit: CommitSummary, repository_url: str, display_name: DisplayName
) -> str:
    return (
        f"<a href='{escape_html(commit.url)}'><font color=606060>"
        f"<kbd>{escape_html(commit.short_sha)}</kbd></font></a> "
        f"{_commit_author(commit, display_name)}: "
        f"<span title='{escape_html(commit.message)}'>"
        f"{_link_issue_references(commit.title, repository_url)}</span>"
    )


def _push_html(event: PushEvent, display_name: DisplayName) -> str:
    verb = "<font color='red'>force-pushed</font>" if event.forced else "pushed"
    count = event.commit_count
    noun = "commit" if count == 1 else "commits"
    parts = [
        f"{_repository_tag(event)} {_user_link(event.actor, display_name)} {verb} "
        f"<a href='{escape_html(event.url or _repository_url(event))}'>"
        f"<b>{count}</b> new {noun}</a>"
    ]
    if event.branch and event.branch != event.default_branch:
        parts.append(f" to <kbd>{escape_html(event.branch)}</kbd>")
    repository_url = _repository_url(event)
    parts.extend(
        f"<br>{_commit_html(commit, repository_url, display_name)}"
        for commit in event.commits
    )
    return "".join(parts)


def _numbered_html(
    event: PullRequestEvent | IssueEvent, noun: str, display_name: DisplayName
) -> str:
    return (
        f"{_repository_tag(event)} {_user_link(event.actor, display_name)} "
        f"{event.action} {noun} "
        f"<a href='{escape_html(event.url or _repository_url(event))}'>"
        f"#{event.number}</a>: {escape_html(event.summary)}"
    )


def _release_html(event: ReleaseEvent, display_name: DisplayName) -> str:
    noun = "pre-release" if event.prerelease else "release"
    return (
        f"{_repository_tag(event)} {_user_link(event.actor, display_name)} "
        f"published {noun} "
        f"<a href='{escape_html(event.url or _repository_url(event))}'>"
        f"{escape_html(event.tag_name)}</a>: {escape_html(event.summary)}"
    )


def render_html(event: NormalizedEvent, display_name: DisplayName = str) -> str:
    """Render ``event`` as an ``/addhtmlbox`` chat command."""
    match event:
        case PushEvent():
            body = _push_html(event, display_name)
        case PullRequestEvent():
            body = _numbered_html(event, "pull request", display_name)
        case IssueEvent():
            body = _numbered_html(event, "issue", display_name)
        case ReleaseEvent():
            body = _release_html(event, display_name)
        case _:
            typ.assert_never(event)
    return f"/addhtmlbox {suppress_highlights(body)}"


__all__ = ["GITHUB_URL", "render_html", "render_text"]
