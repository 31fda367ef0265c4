"""HMAC verification for GitHub webhook deliveries.

GitHub signs every delivery with ``X-Hub-Signature-256: sha256=<hex>``, the
hex-encoded HMAC-SHA256 of the raw request body keyed by the webhook secret.
Verification must run over the exact bytes received, before any JSON
parsing.
"""

from __future__ import annotations

import hashlib
import hmac

SIGNATURE_HEADER = "X-Hub-Signature-256"
SIGNATURE_PREFIX = "sha256="


def compute_signature(secret: str, payload: bytes) -> str:
    """Return the ``sha256=<hex>`` header value for ``payload``.

    Examples
    --------
    >>> compute_signature("s3cret", b"{}")[:7]
    'sha256='

    """
    digest = hmac.new(secret.encode("utf-8"), payload, hashlib.sha256).hexdigest()
    return f"{SIGNATURE_PREFIX}{digest}"


def verify(secret: str, payload: bytes, signature_header: str | None) -> bool:
    """Return True when ``signature_header`` authenticates ``payload``.

    Every failure mode (missing header, wrong prefix, undecodable hex,
    wrong length, wrong MAC) returns False so callers cannot tell them
    apart.
    """
    if not secret or not signature_header:
        return False
    if not signature_header.startswith(SIGNATURE_PREFIX):
        return False
    try:
        provided = bytes.fromhex(signature_header.removeprefix(SIGNATURE_PREFIX))
    except ValueError:
        return False
    expected = hmac.new(secret.encode("utf-8"), payload, hashlib.sha256).digest()
    return hmac.compare_digest(provided, expected)


__all__ = ["SIGNATURE_HEADER", "SIGNATURE_PREFIX", "compute_signature", "verify"]
