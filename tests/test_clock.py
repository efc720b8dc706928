from __future__ import annotations

import pytest

from pyevsim.clock import SimulatedClock, WallClock


def test_simulated_clock_steps() -> None:
    clock = SimulatedClock(step=0.5, start=10.0)

    assert clock.tick() == 0.5
    assert clock.now() == 10.5


def test_simulated_clock_advance_does_not_tick() -> None:
    clock = SimulatedClock(step=1.0)
    clock.advance(30.0)

    assert clock.now() == 30.0
    assert clock.tick() == 1.0


def test_wall_clock_first_tick_is_zero() -> None:
    clock = WallClock()

    assert clock.tick() == 0.0
    assert clock.tick() >= 0.0


def test_wall_clock_measures_elapsed(monkeypatch: pytest.MonkeyPatch) -> None:
    times = iter([100.0, 100.25])
    monkeypatch.setattr("pyevsim.clock.time.monotonic", lambda: next(times, 100.25))
    clock = WallClock()

    clock.tick()

    assert clock.tick() == pytest.approx(0.25)
