"""Vehicle state snapshot and its parts."""

from __future__ import annotations

from enum import StrEnum

from pydantic import Field, model_validator

from pyevsim._constants import AC_TEMP_MAX, AC_TEMP_MIN, SOH_CEILING, SOH_FLOOR, DriveMode, mode_max_speed
from pyevsim.models._base import EvSimModel


class TripSelector(StrEnum):
    A = "A"
    B = "B"


class ChargingState(StrEnum):
    IDLE = "idle"
    CHARGING = "charging"


class PedalInput(StrEnum):
    """Discrete driver control signal read by the integrator."""

    ACCELERATE = "accelerate"
    BRAKE = "brake"
    REGEN = "regen"
    NEUTRAL = "neutral"


class Profile(EvSimModel):
    drive_mode: DriveMode = DriveMode.ECO
    ac_temp: float = Field(default=22.0, ge=AC_TEMP_MIN, le=AC_TEMP_MAX)


class OpenChargeSession(EvSimModel):
    """Marker for a charging session in progress."""

    start_time: float
    start_soc: float


class ChargingLog(EvSimModel):
    """A closed charging session."""

    start_time: float
    end_time: float
    start_soc: float
    end_soc: float
    energy_added: float = Field(ge=0)
    """kWh added over the session, never negative."""


class SohHistoryEntry(EvSimModel):
    """Battery health sample, recorded every ~50 km."""

    odometer: float
    cycle_count: float
    avg_battery_temp: float
    soh: float | None = None
    eco_percent: float
    city_percent: float
    sports_percent: float


class SohForecastPoint(EvSimModel):
    odometer: float
    soh: float


def _initial_soh_history() -> tuple[SohHistoryEntry, ...]:
    # A new car starts with a single sample.
    return (
        SohHistoryEntry(
            odometer=0.0,
            cycle_count=0.0,
            avg_battery_temp=25.0,
            soh=100.0,
            eco_percent=100.0,
            city_percent=0.0,
            sports_percent=0.0,
        ),
    )


def _default_profiles() -> dict[str, Profile]:
    return {
        "Pritesh": Profile(drive_mode=DriveMode.ECO, ac_temp=22.0),
        "Alex Doe": Profile(drive_mode=DriveMode.ECO, ac_temp=22.0),
        "Ben Smith": Profile(drive_mode=DriveMode.CITY, ac_temp=20.0),
        "Chloe Ray": Profile(drive_mode=DriveMode.SPORTS, ac_temp=24.0),
    }


def _zero_mode_distance() -> dict[DriveMode, float]:
    return {mode: 0.0 for mode in DriveMode}


class VehicleSnapshot(EvSimModel):
    """Single aggregate record holding all simulation state.

    Histories named ``*_history`` (except ``soh_history``) are
    most-recent-first: index 0 is the sample produced by the latest tick.
    ``soh_history`` and ``charging_logs`` are chronological (oldest first).
    """

    # Kinematics
    speed: float = Field(default=0.0, ge=0.0)
    display_speed: float = 0.0
    acceleration: float = 0.0
    power: float = 0.0

    # Odometry
    odometer: float = 0.0
    trip_a: float = 0.0
    trip_b: float = 0.0
    active_trip: TripSelector = TripSelector.A

    # Energy
    battery_soc: float = Field(default=100.0, ge=0.0, le=100.0)
    range_km: float = Field(default=450.0, ge=0.0)
    recent_wh_per_km: float = 158.33
    eco_score: float = 85.0

    # Battery health
    pack_soh: float = Field(default=100.0, ge=SOH_FLOOR, le=SOH_CEILING)
    equivalent_full_cycles: float = 0.0
    pack_nominal_capacity_kwh: float = 75.0
    pack_usable_fraction: float = 0.95

    # Thermal / derived
    battery_temp: float = 30.0
    inside_temp: float = 25.0
    outside_temp: float = 25.0
    regen_limit_factor: float = 1.0

    # Control inputs
    pedal: PedalInput = PedalInput.NEUTRAL
    drive_mode: DriveMode = DriveMode.ECO
    ac_on: bool = False
    ac_temp: float = Field(default=22.0, ge=AC_TEMP_MIN, le=AC_TEMP_MAX)
    passengers: int = Field(default=1, ge=0)
    goods_in_boot: bool = False
    is_charging: bool = False

    # Bounded histories
    speed_history: tuple[float, ...] = ()
    acceleration_history: tuple[float, ...] = ()
    power_history: tuple[float, ...] = ()
    drive_mode_history: tuple[DriveMode, ...] = ()
    soh_history: tuple[SohHistoryEntry, ...] = Field(default_factory=_initial_soh_history)

    # Charging
    charging_logs: tuple[ChargingLog, ...] = ()
    last_charge_log: OpenChargeSession | None = None

    # Profiles
    profiles: dict[str, Profile] = Field(default_factory=_default_profiles)
    active_profile: str = "Pritesh"

    # Advisory outputs
    driving_recommendation: str = "Start driving to get recommendations."
    recommendation_justification: str = ""
    driving_style: str = "Balanced"
    driving_style_recommendations: tuple[str, ...] = ()
    predicted_dynamic_range: float = 450.0
    range_confidence: float | None = None
    soh_forecast: tuple[SohForecastPoint, ...] = ()
    fatigue_warning: str | None = None
    fatigue_level: float = 0.0

    # Driving-style counters
    harsh_brake_events: int = 0
    harsh_accel_events: int = 0
    mode_distance_km: dict[DriveMode, float] = Field(default_factory=_zero_mode_distance)

    # Bookkeeping
    last_update: float = 0.0

    @classmethod
    def default(cls, *, now: float = 0.0) -> VehicleSnapshot:
        """Initial snapshot created once at process start."""
        return cls(last_update=now)

    @model_validator(mode="after")
    def _check_invariants(self) -> VehicleSnapshot:
        if not self.profiles:
            raise ValueError("at least one profile must remain")
        if self.active_profile not in self.profiles:
            raise ValueError(f"active profile {self.active_profile!r} is not a known profile")
        if self.is_charging != (self.last_charge_log is not None):
            raise ValueError("is_charging must be set iff a charging session is open")
        if self.speed > mode_max_speed(self.drive_mode):
            raise ValueError(f"speed {self.speed} exceeds the {self.drive_mode} maximum")
        return self

    @property
    def charging_state(self) -> ChargingState:
        return ChargingState.CHARGING if self.is_charging else ChargingState.IDLE

    @property
    def active_trip_distance(self) -> float:
        return self.trip_a if self.active_trip == TripSelector.A else self.trip_b

    @property
    def active_profile_settings(self) -> Profile:
        return self.profiles[self.active_profile]
