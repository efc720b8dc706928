"""Kinematic integrator.

Advances speed and smoothed acceleration by one tick. Acceleration follows
the pedal target through a first-order lag (the inertia factor) rather than
jumping to it; the regen and eco-score math downstream depends on that lag.
"""

from __future__ import annotations

from dataclasses import dataclass

from pyevsim._constants import COAST_DECAY, INERTIA_FACTOR, MS2_TO_KMH_PER_S, ModeEnvelope
from pyevsim._normalize import clamp
from pyevsim.models.state import PedalInput


@dataclass(frozen=True)
class KinematicStep:
    speed: float
    """km/h after the tick."""
    acceleration: float
    """Smoothed acceleration in m/s²."""
    distance_km: float
    target_acceleration: float


def target_acceleration(pedal: PedalInput, envelope: ModeEnvelope) -> float:
    if pedal is PedalInput.ACCELERATE:
        return envelope.accel_rate
    if pedal is PedalInput.BRAKE:
        return -envelope.brake_rate
    if pedal is PedalInput.REGEN:
        return -envelope.strong_regen_brake_rate
    return 0.0


def integrate(
    speed: float,
    acceleration: float,
    dt: float,
    pedal: PedalInput,
    envelope: ModeEnvelope,
    *,
    tethered: bool = False,
) -> KinematicStep:
    """Advance the kinematic state by *dt* seconds.

    Speed is clamped to ``[0, envelope.max_speed]`` using the envelope passed
    in, i.e. the mode active now. A tethered vehicle (charging) ignores the
    pedal and stays at rest.
    """
    if dt <= 0:
        raise ValueError(f"dt must be positive, got {dt}")

    target = 0.0 if tethered else target_acceleration(pedal, envelope)
    smoothed = acceleration + (target - acceleration) * INERTIA_FACTOR

    if tethered:
        return KinematicStep(speed=0.0, acceleration=smoothed, distance_km=0.0, target_acceleration=target)

    new_speed = speed + smoothed * dt * MS2_TO_KMH_PER_S
    if target == 0.0:
        new_speed *= COAST_DECAY
    new_speed = clamp(new_speed, 0.0, envelope.max_speed)

    return KinematicStep(
        speed=new_speed,
        acceleration=smoothed,
        distance_km=new_speed * dt / 3600.0,
        target_acceleration=target,
    )
