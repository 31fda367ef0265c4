"""Bounded recency cache that suppresses redelivered webhook events.

GitHub delivers webhooks at least once, and operators can redeliver them by
hand. The cache remembers the fingerprints of the most recently relayed
events; a fingerprint still present suppresses another relay. The window is
bounded by capacity rather than time, so an evicted fingerprint may be
relayed again.

Usage
-----
>>> cache = RecencyCache(capacity=2)
>>> cache.seen_or_insert("a")
False
>>> cache.seen_or_insert("a")
True

"""

from __future__ import annotations

import collections
import threading


class RecencyCache:
    """Least-recently-used set of fingerprints with atomic check-and-insert.

    A ``threading.Lock`` guards every operation, so the cache is safe for
    coroutines on one event loop and for server worker threads alike. The
    critical sections never await.
    """

    def __init__(self, capacity: int) -> None:
        """Create an empty cache holding at most ``capacity`` fingerprints."""
        if capacity < 1:
            msg = f"capacity must be positive, got: {capacity}"
            raise ValueError(msg)
        self._capacity = capacity
        self._entries: collections.OrderedDict[str, None] = collections.OrderedDict()
        self._lock = threading.Lock()

    @property
    def capacity(self) -> int:
        """Return the maximum number of fingerprints retained."""
        return self._capacity

    def __len__(self) -> int:
        """Return the number of fingerprints currently retained."""
        with self._lock:
            return len(self._entries)

    def __contains__(self, fingerprint: object) -> bool:
        """Report presence without refreshing recency."""
        with self._lock:
            return fingerprint in self._entries

    def seen_or_insert(self, fingerprint: str) -> bool:
        """Return True if ``fingerprint`` was present; insert it otherwise.

        A hit refreshes the entry's recency. An insert that would exceed the
        capacity evicts the least recently used fingerprint first.
        """
        with self._lock:
            if fingerprint in self._entries:
                self._entries.move_to_end(fingerprint)
                return True
            if len(self._entries) >= self._capacity:
                self._entries.popitem(last=False)
            self._entries[fingerprint] = None
            return False

    def discard(self, fingerprint: str) -> None:
        """Forget ``fingerprint`` so a later delivery is treated as new."""
        with self._lock:
            self._entries.pop(fingerprint, None)


__all__ = ["RecencyCache"]
