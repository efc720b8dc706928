"""Static lookup tables shared across the simulation."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class DriveMode(StrEnum):
    ECO = "Eco"
    CITY = "City"
    SPORTS = "Sports"


@dataclass(frozen=True)
class ModeEnvelope:
    """Performance envelope of a drive mode.

    Rates are in m/s², speed in km/h.
    """

    max_speed: float
    accel_rate: float
    brake_rate: float
    strong_regen_brake_rate: float
    regen_efficiency: float


MODE_ENVELOPES: dict[DriveMode, ModeEnvelope] = {
    DriveMode.ECO: ModeEnvelope(
        max_speed=45.0,
        accel_rate=1.2,
        brake_rate=4.0,
        strong_regen_brake_rate=5.0,
        regen_efficiency=0.75,
    ),
    DriveMode.CITY: ModeEnvelope(
        max_speed=75.0,
        accel_rate=2.0,
        brake_rate=5.0,
        strong_regen_brake_rate=6.0,
        regen_efficiency=0.70,
    ),
    DriveMode.SPORTS: ModeEnvelope(
        max_speed=120.0,
        accel_rate=3.5,
        brake_rate=6.0,
        strong_regen_brake_rate=7.0,
        regen_efficiency=0.65,
    ),
}


def mode_envelope(mode: DriveMode | str) -> ModeEnvelope:
    """Return the envelope for *mode* (accepts the enum or its string value)."""
    return MODE_ENVELOPES[DriveMode(mode)]


def mode_max_speed(mode: DriveMode | str) -> float:
    return mode_envelope(mode).max_speed


# ------------------------------------------------------------------
# Integrator / smoothing factors
# ------------------------------------------------------------------

INERTIA_FACTOR = 0.1
COAST_DECAY = 0.99
MS2_TO_KMH_PER_S = 3.6
DISPLAY_SPEED_SMOOTHING = 0.1
EFFICIENCY_SMOOTHING = 0.05
ECO_SCORE_DECAY = 0.9995

REGEN_MIN_DECELERATION = -0.1  # m/s²
REGEN_MIN_SPEED = 1.0  # km/h
ENERGY_EPSILON = 1e-6

HARSH_BRAKE_THRESHOLD = -3.0  # m/s²
HARSH_ACCEL_THRESHOLD = 2.5  # m/s²

# ------------------------------------------------------------------
# Battery health
# ------------------------------------------------------------------

SOH_FLOOR = 70.0
SOH_CEILING = 100.0
SOH_WEAR_PER_SOC_PERCENT = 1e-6
SOH_SAMPLE_DISTANCE_KM = 50.0

# ------------------------------------------------------------------
# Command limits
# ------------------------------------------------------------------

AC_TEMP_MIN = 18.0
AC_TEMP_MAX = 28.0
DEFAULT_PROFILE_DRIVE_MODE = DriveMode.ECO
DEFAULT_PROFILE_AC_TEMP = 22.0

# ------------------------------------------------------------------
# Bounded histories (max length per snapshot field)
# ------------------------------------------------------------------

HISTORY_LIMITS: dict[str, int] = {
    "speed_history": 100,
    "acceleration_history": 100,
    "power_history": 100,
    "drive_mode_history": 50,
    "soh_history": 20,
    "charging_logs": 10,
}

# ------------------------------------------------------------------
# Advisory service endpoints
# ------------------------------------------------------------------

ENDPOINT_DRIVING_RECOMMENDATION = "/advisory/driving-recommendation"
ENDPOINT_DRIVING_STYLE = "/advisory/driving-style"
ENDPOINT_RANGE = "/advisory/range"
ENDPOINT_SOH_FORECAST = "/advisory/soh-forecast"
ENDPOINT_FATIGUE = "/advisory/fatigue"

USER_AGENT = "pyevsim"
