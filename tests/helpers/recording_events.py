"""Stand-in for :class:`herald.observability.RelayEventLogger`.

Records the keyword arguments of every ``log_*`` call so tests can assert on
structured events without waiting for femtologging's worker thread.
"""

from __future__ import annotations

import collections.abc as cabc
import typing as typ


class RecordingEventLogger:
    """Collect ``(event, fields)`` pairs for every ``log_*`` call."""

    def __init__(self) -> None:
        """Start with no recorded events."""
        self.events: list[tuple[str, dict[str, typ.Any]]] = []

    def __getattr__(self, name: str) -> cabc.Callable[..., None]:
        """Return a recorder for ``log_*`` methods."""
        if not name.startswith("log_"):
            raise AttributeError(name)
        event = name.removeprefix("log_")

        def record(**fields: typ.Any) -> None:  # noqa: ANN401
            self.events.append((event, fields))

        return record

    def of(self, event: str) -> list[dict[str, typ.Any]]:
        """Return the fields of every recorded ``event``, oldest first."""
        return [fields for name, fields in self.events if name == event]

    def names(self) -> list[str]:
        """Return recorded event names in order."""
        return [name for name, _ in self.events]
