"""
Run Deadline

Tracks the single run-wide wall-clock budget. Expiry is a control-flow
signal checked before committing to more work, never an exception.
"""

import time
from typing import Optional

from .constants import MAX_RUNTIME_SECONDS


class Deadline:
    """
    Wall-clock budget for one pipeline invocation.

    Usage:
        deadline = Deadline(50)
        for batch in batches:
            if deadline.expired():
                break
    """

    def __init__(self, seconds: Optional[float] = MAX_RUNTIME_SECONDS, clock=time.monotonic):
        self._clock = clock
        self.seconds = seconds
        self.started_at = clock()

    def elapsed(self) -> float:
        return self._clock() - self.started_at

    def remaining(self) -> float:
        """Seconds left, or infinity for an unbounded deadline."""
        if self.seconds is None:
            return float("inf")
        return max(0.0, self.seconds - self.elapsed())

    def expired(self) -> bool:
        if self.seconds is None:
            return False
        return self.elapsed() > self.seconds

    @classmethod
    def unbounded(cls) -> "Deadline":
        return cls(None)
