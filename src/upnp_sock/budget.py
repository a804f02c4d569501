"""
Timeout Budget

A caller-owned count of whole seconds shared across a sequence of socket
calls. Each call charges the seconds it used, so the sequence as a whole
runs out of time even though no single call does.
"""

import time
from typing import Optional


def wall_seconds() -> int:
    """Coarse wall clock, whole seconds."""
    return int(time.time())


class TimeoutBudget:
    """
    Remaining seconds for a sequence of socket calls.

    - negative: already expired, calls fail without touching the socket
    - zero: no deadline, calls wait forever and the budget never decays
    - positive: calls wait at most this many seconds
    """

    def __init__(self, seconds: int = 0):
        self.seconds = int(seconds)

    @property
    def expired(self) -> bool:
        return self.seconds < 0

    @property
    def unbounded(self) -> bool:
        return self.seconds == 0

    def wait_timeout(self) -> Optional[int]:
        """Timeout to hand to a readiness wait; None means wait forever."""
        if self.unbounded:
            return None
        return self.seconds

    def charge(self, elapsed: int) -> None:
        """Subtract elapsed whole seconds. A zero budget is never charged."""
        if self.seconds != 0:
            self.seconds -= int(elapsed)

    def __int__(self) -> int:
        return self.seconds

    def __eq__(self, other) -> bool:
        if isinstance(other, TimeoutBudget):
            return self.seconds == other.seconds
        if isinstance(other, int):
            return self.seconds == other
        return NotImplemented

    def __hash__(self):
        return hash(self.seconds)

    def __repr__(self) -> str:
        return f"TimeoutBudget({self.seconds})"
