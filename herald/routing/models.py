"""Typed routing document structures.

The routing document maps repositories to the chat rooms that should hear
about them, optionally narrowing what is announced with regular-expression
filters. It is authored as YAML (or inline JSON) and decoded with msgspec.
"""

from __future__ import annotations

import msgspec


class PatternFilter(msgspec.Struct, kw_only=True):
    """Allow and deny regular expressions over one event attribute.

    Attributes
    ----------
    allow : list[str]
        When non-empty, the attribute must match at least one pattern.
    deny : list[str]
        The event is dropped when the attribute matches any pattern.

    """

    allow: list[str] = msgspec.field(default_factory=list)
    deny: list[str] = msgspec.field(default_factory=list)


class RouteFilters(msgspec.Struct, kw_only=True):
    """Filters applied to a repository's events before rendering.

    Attributes
    ----------
    branches : PatternFilter
        Patterns over the branch a push targets or a pull request's base
        branch. Events without a branch are unaffected.
    actors : PatternFilter
        Patterns over the GitHub login that triggered the event.

    """

    branches: PatternFilter = msgspec.field(default_factory=PatternFilter)
    actors: PatternFilter = msgspec.field(default_factory=PatternFilter)


class RepositoryRoute(msgspec.Struct, kw_only=True):
    """Delivery settings for one repository.

    Attributes
    ----------
    rooms : list[str]
        Rooms that receive the repository's notifications. An empty list
        mutes the repository, even when a default room is configured.
    secret : str, optional
        Webhook secret overriding the global one for this repository.
    push_default_branch_only : bool
        Only announce pushes to the repository's default branch.
    filters : RouteFilters
        Branch and actor filters.

    """

    rooms: list[str] = msgspec.field(default_factory=list)
    secret: str | None = None
    push_default_branch_only: bool = True
    filters: RouteFilters = msgspec.field(default_factory=RouteFilters)


class RoutingDocument(msgspec.Struct, kw_only=True):
    """Root of the routing document.

    Attributes
    ----------
    default_room : str, optional
        Room for repositories without an explicit route.
    username_aliases : dict[str, str]
        Display names keyed by GitHub login (matched case-insensitively).
    repositories : dict[str, RepositoryRoute]
        Routes keyed by ``owner/name``.

    """

    default_room: str | None = None
    username_aliases: dict[str, str] = msgspec.field(default_factory=dict)
    repositories: dict[str, RepositoryRoute] = msgspec.field(default_factory=dict)


__all__ = ["PatternFilter", "RepositoryRoute", "RouteFilters", "RoutingDocument"]
