"""Time sources for phase timing.

Solvers never call ``time`` directly; they read ``self.clock.now()`` so
tests can inject a deterministic clock.
"""

from __future__ import annotations

import time
from typing import Protocol


class Clock(Protocol):
    def now(self) -> float:
        """Current time in milliseconds."""
        ...


class PerfCounterClock:
    """Wall clock backed by ``time.perf_counter``."""

    def now(self) -> float:
        return time.perf_counter() * 1000.0
