"""Map normalized events onto routed chat messages."""

from __future__ import annotations

import dataclasses as dc
import typing as typ

from herald.config import MessageFormat
from herald.events import PushEvent

from .templates import render_html, render_text

if typ.TYPE_CHECKING:
    from herald.events import NormalizedEvent
    from herald.routing import CompiledRoute, RoutingTable


@dc.dataclass(frozen=True, slots=True)
class RoutedMessage:
    """One line of chat text addressed to one room."""

    room: str
    text: str


def _off_default_branch(event: NormalizedEvent, route: CompiledRoute) -> bool:
    if not isinstance(event, PushEvent) or not route.push_default_branch_only:
        return False
    # Payloads without a default branch are announced rather than guessed at.
    return event.default_branch is not None and event.branch != event.default_branch


class MessageRenderer:
    """Render events for every room routed to their repository.

    The renderer only reads the immutable routing table, so one instance is
    shared by all concurrent deliveries.
    """

    def __init__(
        self,
        routing: RoutingTable,
        message_format: MessageFormat = MessageFormat.TEXT,
    ) -> None:
        """Bind the renderer to a routing table and output dialect."""
        self._routing = routing
        self._message_format = message_format

    @property
    def message_format(self) -> MessageFormat:
        """Return the dialect messages are rendered in."""
        return self._message_format

    def render(self, event: NormalizedEvent) -> list[RoutedMessage]:
        """Return one message per room that should announce ``event``.

        The list is empty when the repository is unrouted or muted, when a
        push targets a non-default branch of a repository announcing only its
        default branch, or when a branch or actor filter rejects the event.
        """
        route = self._routing.route_for(event.repository)
        if route is None or not route.rooms:
            return []
        if _off_default_branch(event, route) or route.filters.should_drop(event):
            return []

        display_name = self._routing.display_name
        if self._message_format is MessageFormat.HTML:
            text = render_html(event, display_name)
        else:
            text = render_text(event, display_name)
        return [RoutedMessage(room=room, text=text) for room in route.rooms]


__all__ = ["MessageRenderer", "RoutedMessage"]
