"""Immutable routing lookups compiled from a routing document."""

from __future__ import annotations

import collections.abc as cabc
import dataclasses as dc
import typing as typ

from .filters import CompiledRouteFilters, compile_route_filters
from .validation import to_room_id

if typ.TYPE_CHECKING:
    from .models import RoutingDocument


@dc.dataclass(frozen=True, slots=True)
class CompiledRoute:
    """Delivery settings for one repository, ready for lookups.

    Attributes
    ----------
    rooms
        Canonical room identifiers, de-duplicated in configured order.
    secret
        Webhook secret override, or ``None`` to use the global secret.
    push_default_branch_only
        Suppress pushes to branches other than the default branch.
    filters
        Compiled branch and actor filters.

    """

    rooms: tuple[str, ...] = ()
    secret: str | None = None
    push_default_branch_only: bool = True
    filters: CompiledRouteFilters = CompiledRouteFilters()


@dc.dataclass(frozen=True, slots=True)
class RoutingTable:
    """Repository to room routing with a default-room fallback.

    Repository names and usernames are matched case-insensitively.

    Examples
    --------
    >>> table = RoutingTable(default_room="dev")
    >>> table.rooms_for("Org/Repo")
    ('dev',)

    """

    routes: cabc.Mapping[str, CompiledRoute] = dc.field(default_factory=dict)
    default_room: str | None = None
    username_aliases: cabc.Mapping[str, str] = dc.field(default_factory=dict)

    @classmethod
    def from_document(
        cls, document: RoutingDocument, *, default_room: str | None = None
    ) -> RoutingTable:
        """Compile a validated routing document.

        ``default_room`` overrides the document's own default room.
        """
        routes = {
            slug.lower(): CompiledRoute(
                rooms=tuple(dict.fromkeys(to_room_id(room) for room in route.rooms)),
                secret=route.secret,
                push_default_branch_only=route.push_default_branch_only,
                filters=compile_route_filters(route.filters),
            )
            for slug, route in document.repositories.items()
        }
        fallback = default_room or document.default_room
        return cls(
            routes=routes,
            default_room=to_room_id(fallback) if fallback else None,
            username_aliases={
                login.strip().lower(): alias
                for login, alias in document.username_aliases.items()
            },
        )

    def route_for(self, repository: str) -> CompiledRoute | None:
        """Return the route for ``repository``, falling back to the default room.

        ``None`` means the repository is not routed anywhere.
        """
        route = self.routes.get(repository.lower())
        if route is not None:
            return route
        if self.default_room is None:
            return None
        return CompiledRoute(rooms=(self.default_room,))

    def rooms_for(self, repository: str) -> tuple[str, ...]:
        """Return the rooms that announce ``repository``."""
        route = self.route_for(repository)
        return route.rooms if route is not None else ()

    def secret_for(self, repository: str | None) -> str | None:
        """Return the per-repository webhook secret, if one is configured."""
        if repository is None:
            return None
        route = self.routes.get(repository.lower())
        return route.secret if route is not None else None

    def display_name(self, login: str) -> str:
        """Return the alias for ``login``, or ``login`` itself."""
        return self.username_aliases.get(login.lower(), login)

    def all_rooms(self) -> tuple[str, ...]:
        """Return every routed room plus the default room, without repeats."""
        rooms: dict[str, None] = {}
        for route in self.routes.values():
            rooms.update(dict.fromkeys(route.rooms))
        if self.default_room is not None:
            rooms[self.default_room] = None
        return tuple(rooms)


__all__ = ["CompiledRoute", "RoutingTable"]
