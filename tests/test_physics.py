from __future__ import annotations

import pytest

from pyevsim._constants import COAST_DECAY, MODE_ENVELOPES, DriveMode, mode_envelope
from pyevsim.models.state import PedalInput
from pyevsim.physics import integrate, target_acceleration

ECO = mode_envelope(DriveMode.ECO)


def test_target_acceleration_per_pedal() -> None:
    assert target_acceleration(PedalInput.ACCELERATE, ECO) == ECO.accel_rate
    assert target_acceleration(PedalInput.BRAKE, ECO) == -ECO.brake_rate
    assert target_acceleration(PedalInput.REGEN, ECO) == -ECO.strong_regen_brake_rate
    assert target_acceleration(PedalInput.NEUTRAL, ECO) == 0.0


def test_acceleration_lags_toward_target() -> None:
    step = integrate(0.0, 0.0, 1.0, PedalInput.ACCELERATE, ECO)

    assert step.acceleration == pytest.approx(ECO.accel_rate * 0.1)
    assert step.speed == pytest.approx(ECO.accel_rate * 0.1 * 3.6)
    assert step.distance_km == pytest.approx(step.speed / 3600.0)


def test_speed_is_clamped_to_mode_maximum() -> None:
    step = integrate(44.9, 1.2, 1.0, PedalInput.ACCELERATE, ECO)

    assert step.speed == ECO.max_speed


def test_speed_never_negative_when_braking_from_rest() -> None:
    step = integrate(0.0, -3.0, 1.0, PedalInput.BRAKE, ECO)

    assert step.speed == 0.0
    assert step.distance_km == 0.0


def test_coasting_applies_decay() -> None:
    step = integrate(30.0, 0.0, 0.5, PedalInput.NEUTRAL, ECO)

    assert step.speed == pytest.approx(30.0 * COAST_DECAY)


def test_tethered_vehicle_stays_at_rest() -> None:
    step = integrate(0.0, 0.0, 1.0, PedalInput.ACCELERATE, ECO, tethered=True)

    assert step.speed == 0.0
    assert step.target_acceleration == 0.0


def test_non_positive_dt_rejected() -> None:
    with pytest.raises(ValueError):
        integrate(10.0, 0.0, 0.0, PedalInput.NEUTRAL, ECO)


def test_every_mode_has_an_envelope() -> None:
    assert set(MODE_ENVELOPES) == set(DriveMode)
    assert mode_envelope(DriveMode.SPORTS).max_speed > mode_envelope(DriveMode.CITY).max_speed > ECO.max_speed
