"""GitHub webhook intake."""

from __future__ import annotations

from .models import WebhookDelivery
from .signature import SIGNATURE_HEADER, compute_signature, verify

__all__ = ["SIGNATURE_HEADER", "WebhookDelivery", "compute_signature", "verify"]
