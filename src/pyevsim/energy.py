"""Energy and range model.

Converts tractive and accessory power into state-of-charge change, keeps an
exponentially smoothed Wh/km figure and derives the instantaneous range.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from pyevsim._constants import (
    EFFICIENCY_SMOOTHING,
    ENERGY_EPSILON,
    REGEN_MIN_DECELERATION,
    REGEN_MIN_SPEED,
    ModeEnvelope,
)
from pyevsim._normalize import clamp, finite_or
from pyevsim.config import VehicleParameters


@dataclass(frozen=True)
class PowerBreakdown:
    wheel_kw: float
    regen_kw: float
    motor_kw: float
    accessory_kw: float

    @property
    def total_kw(self) -> float:
        return self.motor_kw + self.accessory_kw


@dataclass(frozen=True)
class EnergyStep:
    power_kw: float
    energy_wh: float
    soc: float
    soc_delta: float
    """Signed SOC change in percent (negative while discharging)."""
    recent_wh_per_km: float
    range_km: float


def vehicle_mass(vehicle: VehicleParameters, passengers: int, goods_in_boot: bool) -> float:
    mass = vehicle.mass_kg + max(0, passengers) * vehicle.passenger_mass_kg
    if goods_in_boot:
        mass += vehicle.boot_load_kg
    return mass


def tractive_power(
    speed_kmh: float,
    acceleration: float,
    *,
    vehicle: VehicleParameters,
    envelope: ModeEnvelope,
    passengers: int,
    goods_in_boot: bool,
    ac_on: bool,
    regen_limit_factor: float = 1.0,
) -> PowerBreakdown:
    """Power drawn from the pack by a moving vehicle (kW, negative = regen)."""
    speed_ms = speed_kmh / 3.6
    mass = vehicle_mass(vehicle, passengers, goods_in_boot)

    f_rolling = vehicle.rolling_resistance_coefficient * mass * vehicle.gravity
    f_drag = 0.5 * vehicle.drag_coefficient * vehicle.frontal_area_m2 * vehicle.air_density * speed_ms**2
    f_accel = mass * acceleration
    f_total = f_rolling + f_drag + f_accel

    wheel_kw = f_total * speed_ms / 1000.0 if f_total > 0 else 0.0

    regen_kw = 0.0
    if acceleration < REGEN_MIN_DECELERATION and speed_kmh > REGEN_MIN_SPEED:
        recoverable = mass * abs(acceleration) * speed_ms / 1000.0
        cap = vehicle.max_regen_kw * max(0.0, regen_limit_factor)
        regen_kw = min(recoverable, cap) * envelope.regen_efficiency

    motor_kw = (wheel_kw - regen_kw) / vehicle.drivetrain_efficiency
    accessory_kw = vehicle.ac_power_kw if ac_on else 0.0
    return PowerBreakdown(wheel_kw=wheel_kw, regen_kw=regen_kw, motor_kw=motor_kw, accessory_kw=accessory_kw)


def smooth_efficiency(previous: float, energy_wh: float, distance_km: float) -> float:
    """Exponentially smooth Wh/km toward this tick's instantaneous figure."""
    if energy_wh > ENERGY_EPSILON and distance_km > ENERGY_EPSILON:
        instantaneous = energy_wh / distance_km
    else:
        instantaneous = previous
    smoothed = previous + (instantaneous - previous) * EFFICIENCY_SMOOTHING
    return finite_or(smoothed, previous)


def estimate_range(
    soc: float,
    wh_per_km: float,
    *,
    usable_fraction: float,
    nominal_capacity_kwh: float,
    previous: float,
) -> float:
    if not math.isfinite(wh_per_km) or wh_per_km <= 0:
        return max(0.0, previous)
    usable_kwh = (soc / 100.0) * usable_fraction * nominal_capacity_kwh
    return max(0.0, finite_or(usable_kwh / (wh_per_km / 1000.0), previous))


def energy_step(
    *,
    power_kw: float,
    dt: float,
    soc: float,
    distance_km: float,
    nominal_capacity_kwh: float,
    usable_fraction: float,
    previous_wh_per_km: float,
    previous_range_km: float,
    charge_gain: float | None = None,
) -> EnergyStep:
    """Apply one tick of energy flow.

    When *charge_gain* is given (percent SOC added by the charger this tick) it
    replaces the discharge computed from *power_kw*.
    """
    energy_wh = finite_or(power_kw * 1000.0 * (dt / 3600.0), 0.0)

    if charge_gain is not None:
        soc_delta = charge_gain
    elif nominal_capacity_kwh > 0:
        soc_delta = -(energy_wh / 1000.0) / nominal_capacity_kwh * 100.0
    else:
        soc_delta = 0.0

    new_soc = clamp(soc + soc_delta, 0.0, 100.0)
    recent = smooth_efficiency(previous_wh_per_km, energy_wh, distance_km)
    range_km = estimate_range(
        new_soc,
        recent,
        usable_fraction=usable_fraction,
        nominal_capacity_kwh=nominal_capacity_kwh,
        previous=previous_range_km,
    )
    return EnergyStep(
        power_kw=power_kw,
        energy_wh=energy_wh,
        soc=new_soc,
        soc_delta=new_soc - soc,
        recent_wh_per_km=recent,
        range_km=range_km,
    )
