from __future__ import annotations

import math

import pytest

from pyevsim._constants import DriveMode, mode_envelope
from pyevsim.config import VehicleParameters
from pyevsim.energy import energy_step, estimate_range, smooth_efficiency, tractive_power, vehicle_mass

VEHICLE = VehicleParameters()
ECO = mode_envelope(DriveMode.ECO)


def _power(speed: float, acceleration: float, **kwargs: object) -> float:
    params: dict[str, object] = {"passengers": 1, "goods_in_boot": False, "ac_on": False}
    params.update(kwargs)
    return tractive_power(speed, acceleration, vehicle=VEHICLE, envelope=ECO, **params).total_kw  # type: ignore[arg-type]


def test_vehicle_mass_includes_passengers_and_boot() -> None:
    assert vehicle_mass(VEHICLE, 2, True) == VEHICLE.mass_kg + 2 * VEHICLE.passenger_mass_kg + VEHICLE.boot_load_kg
    assert vehicle_mass(VEHICLE, -3, False) == VEHICLE.mass_kg


def test_cruising_draws_positive_power() -> None:
    assert _power(50.0, 0.0) > 0


def test_hard_deceleration_regenerates() -> None:
    breakdown = tractive_power(
        60.0,
        -3.0,
        vehicle=VEHICLE,
        envelope=ECO,
        passengers=1,
        goods_in_boot=False,
        ac_on=False,
    )

    assert breakdown.wheel_kw == 0.0
    assert breakdown.regen_kw > 0
    assert breakdown.regen_kw <= VEHICLE.max_regen_kw * ECO.regen_efficiency
    assert breakdown.total_kw < 0


def test_regen_limit_factor_caps_recovery() -> None:
    full = _power(60.0, -3.0)
    limited = _power(60.0, -3.0, regen_limit_factor=0.0)

    assert limited == 0.0
    assert full < limited


def test_ac_adds_accessory_load() -> None:
    assert _power(40.0, 0.0, ac_on=True) == pytest.approx(_power(40.0, 0.0) + VEHICLE.ac_power_kw)


def test_more_mass_means_more_power() -> None:
    assert _power(40.0, 1.0, passengers=5, goods_in_boot=True) > _power(40.0, 1.0)


def test_efficiency_held_when_not_moving() -> None:
    assert smooth_efficiency(150.0, 0.0, 0.0) == 150.0
    assert smooth_efficiency(150.0, -5.0, 0.01) == 150.0


def test_efficiency_moves_toward_instantaneous() -> None:
    smoothed = smooth_efficiency(150.0, 3.0, 0.01)

    assert 150.0 < smoothed < 300.0


def test_range_falls_back_to_previous_for_bad_efficiency() -> None:
    assert estimate_range(80.0, 0.0, usable_fraction=0.95, nominal_capacity_kwh=75.0, previous=300.0) == 300.0
    assert estimate_range(80.0, math.nan, usable_fraction=0.95, nominal_capacity_kwh=75.0, previous=-1.0) == 0.0


def test_range_from_usable_energy() -> None:
    estimated = estimate_range(100.0, 158.33, usable_fraction=0.95, nominal_capacity_kwh=75.0, previous=0.0)

    assert estimated == pytest.approx(75.0 * 0.95 / 0.15833)


def test_energy_step_discharges_and_clamps() -> None:
    step = energy_step(
        power_kw=36.0,
        dt=3600.0,
        soc=10.0,
        distance_km=100.0,
        nominal_capacity_kwh=75.0,
        usable_fraction=0.95,
        previous_wh_per_km=150.0,
        previous_range_km=50.0,
    )

    assert step.soc == 0.0
    assert step.soc_delta == -10.0
    assert step.range_km == 0.0


def test_energy_step_uses_charge_gain_when_charging() -> None:
    step = energy_step(
        power_kw=-22.0,
        dt=1.0,
        soc=50.0,
        distance_km=0.0,
        nominal_capacity_kwh=75.0,
        usable_fraction=0.95,
        previous_wh_per_km=150.0,
        previous_range_km=200.0,
        charge_gain=0.5,
    )

    assert step.soc == pytest.approx(50.5)
    assert step.recent_wh_per_km == 150.0
