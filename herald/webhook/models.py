"""Inbound webhook delivery value."""

from __future__ import annotations

import dataclasses as dc


@dc.dataclass(frozen=True, slots=True)
class WebhookDelivery:
    """One HTTP delivery exactly as received.

    Attributes
    ----------
    payload
        Raw request body. Signatures are computed over these bytes.
    signature
        Value of ``X-Hub-Signature-256``, if sent.
    event_type
        Value of ``X-GitHub-Event``, if sent.
    delivery_id
        Value of ``X-GitHub-Delivery``, if sent. Used only for logging.

    """

    payload: bytes
    signature: str | None = None
    event_type: str | None = None
    delivery_id: str | None = None


__all__ = ["WebhookDelivery"]
