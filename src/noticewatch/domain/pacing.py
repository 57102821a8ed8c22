"""Minimum-interval pacing between consecutive outbound calls."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable


@dataclass(slots=True)
class PacingPolicy:
    """Enforce ``min_interval_seconds`` between calls marked with ``mark``.

    ``wait`` only sleeps for whatever part of the interval has not already
    elapsed since the last mark, so slow calls are not delayed further.
    """

    min_interval_seconds: float
    clock: Callable[[], float] = time.monotonic
    sleep: Callable[[float], None] = time.sleep
    _last: float | None = field(default=None, init=False, repr=False)

    def __post_init__(self) -> None:
        if self.min_interval_seconds < 0:
            raise ValueError("Pacing interval must be non-negative")

    def wait(self) -> float:
        """Block until the interval since the last mark has passed; return the delay."""

        if self._last is None:
            return 0.0
        remaining = self.min_interval_seconds - (self.clock() - self._last)
        if remaining <= 0:
            return 0.0
        self.sleep(remaining)
        return remaining

    def mark(self) -> None:
        self._last = self.clock()

    def reset(self) -> None:
        self._last = None
