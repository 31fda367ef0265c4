"""Exponential reconnect delays."""

from __future__ import annotations

import dataclasses as dc


@dc.dataclass(slots=True)
class ExponentialBackoff:
    """Delay sequence doubling from ``minimum`` up to ``maximum``.

    Examples
    --------
    >>> backoff = ExponentialBackoff(minimum=1.0, maximum=5.0)
    >>> [backoff.next_delay() for _ in range(4)]
    [1.0, 2.0, 4.0, 5.0]

    """

    minimum: float
    maximum: float
    factor: float = 2.0
    _next: float = dc.field(init=False)

    def __post_init__(self) -> None:
        """Validate the bounds and start at the minimum."""
        if self.minimum <= 0:
            msg = f"minimum must be positive, got: {self.minimum}"
            raise ValueError(msg)
        if self.maximum < self.minimum:
            msg = f"maximum {self.maximum} is below minimum {self.minimum}"
            raise ValueError(msg)
        if self.factor < 1:
            msg = f"factor must be at least 1, got: {self.factor}"
            raise ValueError(msg)
        self._next = self.minimum

    def next_delay(self) -> float:
        """Return the next delay and grow the following one."""
        delay = self._next
        self._next = min(self._next * self.factor, self.maximum)
        return delay

    def reset(self) -> None:
        """Restart the sequence at the minimum."""
        self._next = self.minimum


__all__ = ["ExponentialBackoff"]
