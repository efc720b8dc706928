"""Tick pipeline.

One call to :func:`advance` turns the latest snapshot plus the elapsed time
into exactly one :class:`~pyevsim.state.events.StateUpdate`:

physics -> energy/charging -> degradation -> history buffers.

The function is pure; applying the update is the store's job.
"""

from __future__ import annotations

from typing import Any

from pyevsim._constants import (
    DISPLAY_SPEED_SMOOTHING,
    ECO_SCORE_DECAY,
    HARSH_ACCEL_THRESHOLD,
    HARSH_BRAKE_THRESHOLD,
    mode_envelope,
)
from pyevsim._normalize import clamp
from pyevsim.charging import charge_step
from pyevsim.config import VehicleParameters
from pyevsim.degradation import degrade, maybe_sample
from pyevsim.energy import energy_step, tractive_power
from pyevsim.models.state import TripSelector, VehicleSnapshot
from pyevsim.physics import integrate
from pyevsim.state.events import StateUpdate, UpdateSource


def _eco_score(previous: float, acceleration: float, wh_per_km: float) -> float:
    instantaneous = 100.0 - abs(acceleration) * 5.0 - (wh_per_km / 10.0 if wh_per_km > 0 else 0.0)
    return clamp(previous * ECO_SCORE_DECAY + instantaneous * (1.0 - ECO_SCORE_DECAY), 0.0, 100.0)


def _crossed_below(previous: float, current: float, threshold: float) -> bool:
    return current < threshold <= previous


def _crossed_above(previous: float, current: float, threshold: float) -> bool:
    return current > threshold >= previous


def advance(
    snapshot: VehicleSnapshot,
    dt: float,
    now: float,
    vehicle: VehicleParameters,
) -> StateUpdate | None:
    """Compute the update for one tick of *dt* seconds, or ``None`` if ``dt <= 0``."""
    if dt <= 0:
        return None

    mode = snapshot.drive_mode
    envelope = mode_envelope(mode)
    step = integrate(
        snapshot.speed,
        snapshot.acceleration,
        dt,
        snapshot.pedal,
        envelope,
        tethered=snapshot.is_charging,
    )

    charge_gain: float | None = None
    if snapshot.is_charging:
        charge_gain = charge_step(
            snapshot.battery_soc,
            dt,
            charge_rate_kw=vehicle.charge_rate_kw,
            nominal_capacity_kwh=snapshot.pack_nominal_capacity_kwh,
        )
        power_kw = -vehicle.charge_rate_kw
    elif step.speed > 0:
        power_kw = tractive_power(
            step.speed,
            step.acceleration,
            vehicle=vehicle,
            envelope=envelope,
            passengers=snapshot.passengers,
            goods_in_boot=snapshot.goods_in_boot,
            ac_on=snapshot.ac_on,
            regen_limit_factor=snapshot.regen_limit_factor,
        ).total_kw
    else:
        power_kw = 0.0

    energy = energy_step(
        power_kw=power_kw,
        dt=dt,
        soc=snapshot.battery_soc,
        distance_km=step.distance_km,
        nominal_capacity_kwh=snapshot.pack_nominal_capacity_kwh,
        usable_fraction=snapshot.pack_usable_fraction,
        previous_wh_per_km=snapshot.recent_wh_per_km,
        previous_range_km=snapshot.range_km,
        charge_gain=charge_gain,
    )

    wear = degrade(snapshot.pack_soh, energy.soc_delta)
    mode_distance = dict(snapshot.mode_distance_km)
    mode_distance[mode] = mode_distance.get(mode, 0.0) + step.distance_km
    sample = maybe_sample(
        snapshot,
        odometer=snapshot.odometer + step.distance_km,
        cycles=snapshot.equivalent_full_cycles + wear.cycle_delta,
        soh=wear.soh,
        mode_distance_km=mode_distance,
    )

    trip_field = "trip_a" if snapshot.active_trip == TripSelector.A else "trip_b"
    data: dict[str, Any] = {
        "speed": step.speed,
        "display_speed": snapshot.display_speed + (step.speed - snapshot.display_speed) * DISPLAY_SPEED_SMOOTHING,
        "acceleration": step.acceleration,
        "power": energy.power_kw,
        "battery_soc": energy.soc,
        "range_km": energy.range_km,
        "recent_wh_per_km": energy.recent_wh_per_km,
        "eco_score": _eco_score(snapshot.eco_score, step.acceleration, energy.recent_wh_per_km),
        "pack_soh": wear.soh,
        "last_update": now,
        # Deltas
        "odometer": step.distance_km,
        trip_field: step.distance_km,
        "equivalent_full_cycles": wear.cycle_delta,
        "mode_distance_km": {mode: step.distance_km},
        "harsh_brake_events": int(_crossed_below(snapshot.acceleration, step.acceleration, HARSH_BRAKE_THRESHOLD)),
        "harsh_accel_events": int(_crossed_above(snapshot.acceleration, step.acceleration, HARSH_ACCEL_THRESHOLD)),
        # Most-recent-first histories
        "speed_history": [step.speed],
        "acceleration_history": [step.acceleration],
        "power_history": [energy.power_kw],
        "drive_mode_history": [mode],
    }
    if sample is not None:
        data["soh_history"] = [sample]

    return StateUpdate(source=UpdateSource.TICK, data=data)
