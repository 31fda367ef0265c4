"""Branch and actor filters for routed repositories.

Filters are authored per repository in the routing document. At start-up they
are compiled into regular expressions and evaluated against every normalized
event before rendering, so a filtered event never reaches the chat server.
"""

from __future__ import annotations

import dataclasses
import re
import typing as typ

if typ.TYPE_CHECKING:
    from herald.events import NormalizedEvent

    from .models import PatternFilter, RouteFilters


@dataclasses.dataclass(frozen=True, slots=True)
class CompiledPatternFilter:
    """Compiled allow and deny patterns over one attribute."""

    allow: tuple[re.Pattern[str], ...] = ()
    deny: tuple[re.Pattern[str], ...] = ()

    def rejects(self, value: str) -> bool:
        """Return True when ``value`` fails the allow list or hits the deny list."""
        if self.allow and not any(pattern.search(value) for pattern in self.allow):
            return True
        return any(pattern.search(value) for pattern in self.deny)


@dataclasses.dataclass(frozen=True, slots=True)
class CompiledRouteFilters:
    """Compiled route filters ready for dispatch-time evaluation."""

    branches: CompiledPatternFilter = CompiledPatternFilter()
    actors: CompiledPatternFilter = CompiledPatternFilter()

    def should_drop(self, event: NormalizedEvent) -> bool:
        """Return True when the event should not be announced."""
        if event.branch is not None and self.branches.rejects(event.branch):
            return True
        return self.actors.rejects(event.actor)


def _compile_patterns(patterns: PatternFilter) -> CompiledPatternFilter:
    # De-dupe while preserving configured order.
    allow = tuple(re.compile(p) for p in dict.fromkeys(patterns.allow))
    deny = tuple(re.compile(p) for p in dict.fromkeys(patterns.deny))
    return CompiledPatternFilter(allow=allow, deny=deny)


def compile_route_filters(filters: RouteFilters) -> CompiledRouteFilters:
    """Compile a repository's filter configuration into a predicate.

    Patterns are assumed to have passed validation; an invalid expression
    raises ``re.error`` here.
    """
    return CompiledRouteFilters(
        branches=_compile_patterns(filters.branches),
        actors=_compile_patterns(filters.actors),
    )


__all__ = ["CompiledPatternFilter", "CompiledRouteFilters", "compile_route_filters"]
