"""Deterministic fingerprints for relay deduplication."""

from __future__ import annotations

import hashlib
import typing as typ

import msgspec

from .models import event_kind

if typ.TYPE_CHECKING:
    from .models import NormalizedEvent


def make_fingerprint(event: NormalizedEvent) -> str:
    """Return a stable key identifying one relayable occurrence of ``event``.

    The key covers the event kind, the repository (case-insensitive, as
    GitHub treats it), the object identifier and its revision. Components
    are encoded as a JSON array before hashing so separators inside field
    values cannot make two different tuples collide.
    """
    material = msgspec.json.encode(
        [
            event_kind(event),
            event.repository.lower(),
            event.event_id,
            event.revision,
        ]
    )
    return hashlib.sha256(material).hexdigest()


__all__ = ["make_fingerprint"]
