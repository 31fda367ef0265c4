"""Relay pipeline from webhook delivery to chat messages.

Each delivery runs in its own task: verify, normalize, fingerprint, then
check-and-insert into the recency cache, render and enqueue. Verification
and normalization run concurrently across deliveries. The last three steps
run under one ordering lock, so events reach the chat queue in the order
they won the dedup check.

Usage
-----
>>> dispatcher = Dispatcher.from_config(config, session)
>>> result = await dispatcher.dispatch(delivery)
>>> result.outcome
<DeliveryOutcome.RELAYED: 'relayed'>

"""

from __future__ import annotations

import asyncio
import collections.abc as cabc
import dataclasses as dc
import enum
import typing as typ

from herald.dedup import RecencyCache
from herald.events import (
    SUPPORTED_EVENT_TYPES,
    event_kind,
    make_fingerprint,
    normalize,
    peek_repository,
)
from herald.observability import RelayEventLogger
from herald.rendering import MessageRenderer, RoutedMessage
from herald.webhook import verify

if typ.TYPE_CHECKING:
    from herald.config import RelayConfig
    from herald.webhook import WebhookDelivery

SecretResolver: typ.TypeAlias = cabc.Callable[[str | None], str]


class MessageSink(typ.Protocol):
    """Destination for rendered messages, usually the chat session."""

    async def send(self, room: str, text: str) -> bool:
        """Queue ``text`` for ``room``; return whether it was accepted."""
        ...


class DeliveryOutcome(enum.StrEnum):
    """Terminal outcome of one delivery."""

    REJECTED = "rejected"
    IGNORED = "ignored"
    DUPLICATE = "duplicate"
    SUPPRESSED = "suppressed"
    DROPPED = "dropped"
    RELAYED = "relayed"


@dc.dataclass(frozen=True, slots=True)
class DispatchResult:
    """What happened to one delivery.

    Attributes
    ----------
    outcome
        Terminal outcome.
    fingerprint
        Event fingerprint, once normalization succeeded.
    messages
        Messages rendered for the event.
    enqueued
        Number of messages the sink accepted.

    """

    outcome: DeliveryOutcome
    fingerprint: str | None = None
    messages: tuple[RoutedMessage, ...] = ()
    enqueued: int = 0


class Dispatcher:
    """Run deliveries through verification, dedup, rendering and sending.

    Parameters
    ----------
    secret_for
        Returns the webhook secret for a repository full name, or for
        ``None`` when the payload names no repository.
    renderer
        Maps events onto routed messages.
    cache
        Recency cache of relayed fingerprints. Only the dispatcher mutates it.
    sink
        Receives rendered messages.
    event_logger
        Structured event sink.

    """

    def __init__(
        self,
        *,
        secret_for: SecretResolver,
        renderer: MessageRenderer,
        cache: RecencyCache,
        sink: MessageSink,
        event_logger: RelayEventLogger | None = None,
    ) -> None:
        """Wire the pipeline stages together."""
        self._secret_for = secret_for
        self._renderer = renderer
        self._cache = cache
        self._sink = sink
        self._event_logger = event_logger or RelayEventLogger()
        self._order_lock = asyncio.Lock()

    @classmethod
    def from_config(
        cls,
        config: RelayConfig,
        sink: MessageSink,
        *,
        event_logger: RelayEventLogger | None = None,
    ) -> Dispatcher:
        """Build a dispatcher with a renderer and cache sized from ``config``."""
        return cls(
            secret_for=config.secret_for,
            renderer=MessageRenderer(config.routing, config.message_format),
            cache=RecencyCache(config.dedup_capacity),
            sink=sink,
            event_logger=event_logger,
        )

    @property
    def cache(self) -> RecencyCache:
        """Return the recency cache of relayed fingerprints."""
        return self._cache

    @property
    def sink(self) -> MessageSink:
        """Return the sink receiving rendered messages."""
        return self._sink

    async def dispatch(self, delivery: WebhookDelivery) -> DispatchResult:
        """Relay one delivery.

        Nothing but ``repository.full_name`` is read from the payload before
        the signature verifies, and only to choose the secret.

        When the sink accepts none of the messages the outcome is
        ``DROPPED``. In that case, and when the task is cancelled before
        anything was queued, the fingerprint is forgotten so a redelivery can
        still be relayed.
        """
        repository = peek_repository(delivery.payload)
        secret = self._secret_for(repository)
        if not verify(secret, delivery.payload, delivery.signature):
            self._event_logger.log_delivery_rejected(
                delivery_id=delivery.delivery_id,
                event_type=delivery.event_type,
                repository=repository,
            )
            return DispatchResult(DeliveryOutcome.REJECTED)

        event = normalize(delivery.event_type, delivery.payload)
        if event is None:
            event_type = (delivery.event_type or "").strip().lower()
            reason = (
                "not_relayed" if event_type in SUPPORTED_EVENT_TYPES else "unsupported"
            )
            self._event_logger.log_delivery_ignored(
                delivery_id=delivery.delivery_id,
                event_type=delivery.event_type,
                reason=reason,
            )
            return DispatchResult(DeliveryOutcome.IGNORED)

        fingerprint = make_fingerprint(event)
        kind = event_kind(event)
        async with self._order_lock:
            if self._cache.seen_or_insert(fingerprint):
                self._event_logger.log_delivery_duplicate(
                    delivery_id=delivery.delivery_id,
                    kind=kind,
                    repository=event.repository,
                    fingerprint=fingerprint,
                )
                return DispatchResult(DeliveryOutcome.DUPLICATE, fingerprint)

            messages = tuple(self._renderer.render(event))
            if not messages:
                self._event_logger.log_delivery_suppressed(
                    delivery_id=delivery.delivery_id,
                    kind=kind,
                    repository=event.repository,
                )
                return DispatchResult(DeliveryOutcome.SUPPRESSED, fingerprint)

            enqueued = await self._send_all(fingerprint, messages)

        rooms = [message.room for message in messages]
        if enqueued == 0:
            self._event_logger.log_delivery_dropped(
                delivery_id=delivery.delivery_id,
                kind=kind,
                repository=event.repository,
                rooms=rooms,
            )
            return DispatchResult(DeliveryOutcome.DROPPED, fingerprint, messages)

        self._event_logger.log_delivery_relayed(
            delivery_id=delivery.delivery_id,
            kind=kind,
            repository=event.repository,
            rooms=rooms,
            enqueued=enqueued,
        )
        return DispatchResult(DeliveryOutcome.RELAYED, fingerprint, messages, enqueued)

    async def _send_all(
        self, fingerprint: str, messages: tuple[RoutedMessage, ...]
    ) -> int:
        enqueued = 0
        try:
            for message in messages:
                if await self._sink.send(message.room, message.text):
                    enqueued += 1
        finally:
            if enqueued == 0:
                self._cache.discard(fingerprint)
        return enqueued


__all__ = [
    "DeliveryOutcome",
    "DispatchResult",
    "Dispatcher",
    "MessageSink",
    "SecretResolver",
]
