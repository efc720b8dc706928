"""Scheduling clocks.

The simulation asks its clock for the elapsed time once per tick. A wall
clock drives live operation; a simulated clock gives deterministic steps for
tests and scripted runs.
"""

from __future__ import annotations

import time
from typing import Protocol


class TickClock(Protocol):
    """Structural clock interface used by the simulation loop."""

    def now(self) -> float:
        """Current time in seconds."""
        ...

    def tick(self) -> float:
        """Seconds elapsed since the previous tick."""
        ...


class WallClock:
    """Monotonic wall clock. The first tick returns ``0.0`` (a no-op tick)."""

    def __init__(self) -> None:
        self._last: float | None = None

    def now(self) -> float:
        return time.monotonic()

    def tick(self) -> float:
        current = time.monotonic()
        last, self._last = self._last, current
        if last is None:
            return 0.0
        return current - last


class SimulatedClock:
    """Fixed-step clock advancing *step* seconds per tick."""

    def __init__(self, step: float = 1 / 60, *, start: float = 0.0) -> None:
        self.step = step
        self._now = start

    def now(self) -> float:
        return self._now

    def tick(self) -> float:
        self._now += self.step
        return self.step

    def advance(self, seconds: float) -> None:
        """Move time forward without producing a tick."""
        self._now += seconds
