"""
Host Clocks
===========

Sources of the `now` value the service hands to ledger transactions.
The engine itself never reads a clock.

Version: 0.1.0
"""

import threading
import time
from typing import Protocol

from shared.config import ClockMode


class LedgerClock(Protocol):
    """Supplies monotonically non-decreasing timestamps."""

    def now(self) -> int:
        """Timestamp for a read-only query."""
        ...

    def tick(self) -> int:
        """Timestamp for a write transaction."""
        ...


class UnixClock:
    """Wall-clock seconds. Never steps backwards within a process."""

    def __init__(self) -> None:
        self._last = 0
        self._lock = threading.Lock()

    def now(self) -> int:
        with self._lock:
            self._last = max(self._last, int(time.time()))
            return self._last

    def tick(self) -> int:
        return self.now()


class BlockClock:
    """Mock block height, advanced once per write transaction."""

    def __init__(self, height: int = 0) -> None:
        self._height = height
        self._lock = threading.Lock()

    @property
    def height(self) -> int:
        return self._height

    def now(self) -> int:
        return self._height

    def tick(self) -> int:
        with self._lock:
            self._height += 1
            return self._height


def create_clock(mode: ClockMode, height: int = 0) -> LedgerClock:
    """Build the clock for `mode`, seeding block height from `height`."""
    if mode == ClockMode.BLOCK:
        return BlockClock(height)
    return UnixClock()
