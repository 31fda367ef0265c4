"""Structured relay events and error categorisation.

Every delivery outcome and every chat session transition is emitted as one
``[event.type] key=value ...`` log line, suitable for parsing by log
aggregators.

Usage
-----
>>> event_logger = RelayEventLogger()
>>> event_logger.log_delivery_ignored(
...     delivery_id="72d3162e", event_type="ping", reason="unsupported"
... )

"""

from __future__ import annotations

import enum
import typing as typ

from herald.chat.errors import ChatLoginError, ChatTransportError
from herald.logging import get_logger, log_info, log_warning

if typ.TYPE_CHECKING:
    import collections.abc as cabc

logger = get_logger(__name__)


class RelayEventType(enum.StrEnum):
    """Structured log event types for deliveries and the chat session."""

    DELIVERY_REJECTED = "delivery.rejected"
    DELIVERY_IGNORED = "delivery.ignored"
    DELIVERY_DUPLICATE = "delivery.duplicate"
    DELIVERY_SUPPRESSED = "delivery.suppressed"
    DELIVERY_DROPPED = "delivery.dropped"
    DELIVERY_RELAYED = "delivery.relayed"
    CHAT_STATE_CHANGED = "chat.state_changed"
    CHAT_RECONNECT_SCHEDULED = "chat.reconnect_scheduled"
    CHAT_CONNECTION_FAILED = "chat.connection_failed"
    CHAT_MESSAGE_DROPPED = "chat.message_dropped"


class ErrorCategory(enum.StrEnum):
    """Categories for error classification in alerts."""

    TRANSPORT = "transport"
    AUTHENTICATION = "authentication"
    TIMEOUT = "timeout"
    PROTOCOL = "protocol"
    UNKNOWN = "unknown"


_EXCEPTION_CATEGORY_MAP: tuple[tuple[type[BaseException], ErrorCategory], ...] = (
    (TimeoutError, ErrorCategory.TIMEOUT),
    (ChatLoginError, ErrorCategory.AUTHENTICATION),
    (ChatTransportError, ErrorCategory.TRANSPORT),
    (ConnectionError, ErrorCategory.TRANSPORT),
    (ValueError, ErrorCategory.PROTOCOL),
)


def categorize_error(exc: BaseException) -> ErrorCategory:
    """Categorize an exception for alerting purposes.

    Returns
    -------
    ErrorCategory
        The type of failure, for alert routing.

    """
    # Chat errors raised by a timeout are reported as timeouts.
    if isinstance(exc, ChatTransportError | ChatLoginError) and exc.timed_out:
        return ErrorCategory.TIMEOUT

    for exc_type, category in _EXCEPTION_CATEGORY_MAP:
        if isinstance(exc, exc_type):
            return category

    return ErrorCategory.UNKNOWN


class RelayEventLogger:
    """Emit structured relay events via femtologging."""

    def log_delivery_rejected(
        self, *, delivery_id: str | None, event_type: str | None, repository: str | None
    ) -> None:
        """Log a delivery whose signature did not verify."""
        log_warning(
            logger,
            "[%s] delivery_id=%s event_type=%s repository=%s",
            RelayEventType.DELIVERY_REJECTED,
            delivery_id,
            event_type,
            repository,
        )

    def log_delivery_ignored(
        self, *, delivery_id: str | None, event_type: str | None, reason: str
    ) -> None:
        """Log a verified delivery that does not describe a relayed event."""
        log_info(
            logger,
            "[%s] delivery_id=%s event_type=%s reason=%s",
            RelayEventType.DELIVERY_IGNORED,
            delivery_id,
            event_type,
            reason,
        )

    def log_delivery_duplicate(
        self, *, delivery_id: str | None, kind: str, repository: str, fingerprint: str
    ) -> None:
        """Log an event suppressed because it was relayed recently."""
        log_info(
            logger,
            "[%s] delivery_id=%s kind=%s repository=%s fingerprint=%s",
            RelayEventType.DELIVERY_DUPLICATE,
            delivery_id,
            kind,
            repository,
            fingerprint[:12],
        )

    def log_delivery_suppressed(
        self, *, delivery_id: str | None, kind: str, repository: str
    ) -> None:
        """Log an event that routing or filters sent nowhere."""
        log_info(
            logger,
            "[%s] delivery_id=%s kind=%s repository=%s",
            RelayEventType.DELIVERY_SUPPRESSED,
            delivery_id,
            kind,
            repository,
        )

    def log_delivery_dropped(
        self,
        *,
        delivery_id: str | None,
        kind: str,
        repository: str,
        rooms: cabc.Sequence[str],
    ) -> None:
        """Log an event whose messages the chat session refused."""
        log_warning(
            logger,
            "[%s] delivery_id=%s kind=%s repository=%s rooms=%s",
            RelayEventType.DELIVERY_DROPPED,
            delivery_id,
            kind,
            repository,
            ",".join(rooms),
        )

    def log_delivery_relayed(
        self,
        *,
        delivery_id: str | None,
        kind: str,
        repository: str,
        rooms: cabc.Sequence[str],
        enqueued: int,
    ) -> None:
        """Log an event handed to the chat session.

        Parameters
        ----------
        delivery_id
            ``X-GitHub-Delivery`` GUID, when supplied.
        kind
            Event variant tag.
        repository
            Repository full name.
        rooms
            Rooms the event was rendered for.
        enqueued
            Number of messages the chat session accepted.

        """
        log_info(
            logger,
            "[%s] delivery_id=%s kind=%s repository=%s rooms=%s enqueued=%d",
            RelayEventType.DELIVERY_RELAYED,
            delivery_id,
            kind,
            repository,
            ",".join(rooms),
            enqueued,
        )

    def log_state_changed(self, *, previous: str, current: str) -> None:
        """Log a chat session state transition."""
        log_info(
            logger,
            "[%s] previous=%s current=%s",
            RelayEventType.CHAT_STATE_CHANGED,
            previous,
            current,
        )

    def log_reconnect_scheduled(self, *, attempt: int, delay_seconds: float) -> None:
        """Log the delay before the next connection attempt."""
        log_info(
            logger,
            "[%s] attempt=%d delay_seconds=%.3f",
            RelayEventType.CHAT_RECONNECT_SCHEDULED,
            attempt,
            delay_seconds,
        )

    def log_connection_failed(self, *, attempt: int, error: BaseException) -> None:
        """Log a failed or lost chat connection with its error category."""
        log_warning(
            logger,
            "[%s] attempt=%d error_type=%s error_category=%s error_message=%s",
            RelayEventType.CHAT_CONNECTION_FAILED,
            attempt,
            type(error).__name__,
            categorize_error(error),
            str(error),
        )

    def log_message_dropped(self, *, room: str, reason: str) -> None:
        """Log an outbound message discarded by the backpressure policy."""
        log_warning(
            logger,
            "[%s] room=%s reason=%s",
            RelayEventType.CHAT_MESSAGE_DROPPED,
            room,
            reason,
        )


__all__ = ["ErrorCategory", "RelayEventLogger", "RelayEventType", "categorize_error"]
