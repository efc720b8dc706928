"""Simulation configuration for pyevsim."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from pyevsim.exceptions import EvSimConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _env_float(env_key: str, value: str) -> float:
    try:
        return float(value)
    except ValueError as exc:
        raise EvSimConfigError(f"{env_key} must be numeric, got {value!r}") from exc


@dataclasses.dataclass(frozen=True)
class VehicleParameters:
    """Physical constants of the simulated vehicle.

    These correspond to the static vehicle data the energy model reads on
    every tick.
    """

    mass_kg: float = 1960.0
    frontal_area_m2: float = 2.4
    drag_coefficient: float = 0.23
    air_density: float = 1.225
    rolling_resistance_coefficient: float = 0.009
    gravity: float = 9.81
    drivetrain_efficiency: float = 0.9
    max_regen_kw: float = 60.0
    charge_rate_kw: float = 22.0
    ac_power_kw: float = 1.5
    passenger_mass_kg: float = 70.0
    boot_load_kg: float = 50.0


@dataclasses.dataclass(frozen=True)
class SimulationConfig:
    """Simulation configuration.

    Parameters
    ----------
    advisory_enabled : bool
        Run the periodic advisory tasks. When ``False`` the simulation only
        ticks and accepts commands.
    advisory_base_url : str
        Base URL of the external advisory service.
    advisory_timeout : float
        Per-request timeout in seconds for advisory calls.
    tick_interval : float
        Seconds between scheduler ticks in live operation (~one display frame).
    driving_advisory_interval : float
        Throttle window for the driving-advisory task, in seconds.
    fatigue_interval : float
        Throttle window for the fatigue-monitor task, in seconds.
    fatigue_poll_interval : float
        How often the fatigue task wakes to check its throttle window.
    fatigue_min_speed : float
        Below this speed (km/h) the fatigue check is skipped and any warning
        cleared.
    fatigue_confidence_threshold : float
        Confidence above which a fatigue response raises a warning.
    fatigue_window : int
        Number of most recent speed/acceleration samples sent to the fatigue
        endpoint.
    vehicle : VehicleParameters
        Physical constants.
    """

    advisory_enabled: bool = True
    advisory_base_url: str = "http://127.0.0.1:3400"
    advisory_timeout: float = 15.0
    tick_interval: float = 1 / 60
    driving_advisory_interval: float = 10.0
    fatigue_interval: float = 20.0
    fatigue_poll_interval: float = 5.0
    fatigue_min_speed: float = 10.0
    fatigue_confidence_threshold: float = 0.7
    fatigue_window: int = 60
    vehicle: VehicleParameters = dataclasses.field(default_factory=VehicleParameters)

    def __post_init__(self) -> None:
        for name in (
            "tick_interval",
            "driving_advisory_interval",
            "fatigue_interval",
            "fatigue_poll_interval",
            "advisory_timeout",
        ):
            if getattr(self, name) <= 0:
                raise EvSimConfigError(f"{name} must be positive")
        if not 0.0 <= self.fatigue_confidence_threshold <= 1.0:
            raise EvSimConfigError("fatigue_confidence_threshold must be within [0, 1]")
        if self.fatigue_window < 1:
            raise EvSimConfigError("fatigue_window must be at least 1")

    @classmethod
    def from_env(cls, **overrides: Any) -> SimulationConfig:
        """Create configuration from environment variables.

        Reads optional ``EVSIM_*`` variables. Explicit keyword arguments
        override environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        SimulationConfig
            Populated configuration.
        """
        env = os.environ

        vehicle_kwargs: dict[str, float] = {}
        _ENV_VEHICLE_MAP = {
            "EVSIM_MASS_KG": "mass_kg",
            "EVSIM_CHARGE_RATE_KW": "charge_rate_kw",
            "EVSIM_AC_POWER_KW": "ac_power_kw",
            "EVSIM_MAX_REGEN_KW": "max_regen_kw",
            "EVSIM_DRIVETRAIN_EFFICIENCY": "drivetrain_efficiency",
        }
        for env_key, field_name in _ENV_VEHICLE_MAP.items():
            val = env.get(env_key)
            if val is not None:
                vehicle_kwargs[field_name] = _env_float(env_key, val)

        # Allow overriding vehicle fields via a nested dict
        vehicle_overrides = overrides.pop("vehicle", None)
        if isinstance(vehicle_overrides, dict):
            vehicle_kwargs.update(vehicle_overrides)
        elif isinstance(vehicle_overrides, VehicleParameters):
            vehicle_kwargs = dataclasses.asdict(vehicle_overrides)

        vehicle = VehicleParameters(**vehicle_kwargs) if vehicle_kwargs else VehicleParameters()

        config_kwargs: dict[str, Any] = {"vehicle": vehicle}

        base_url = env.get("EVSIM_ADVISORY_BASE_URL")
        if base_url is not None:
            config_kwargs["advisory_base_url"] = base_url.rstrip("/")

        if "advisory_enabled" not in overrides:
            config_kwargs["advisory_enabled"] = _env_bool(env.get("EVSIM_ADVISORY_ENABLED"), True)

        _ENV_FLOAT_MAP = {
            "EVSIM_ADVISORY_TIMEOUT": "advisory_timeout",
            "EVSIM_TICK_INTERVAL": "tick_interval",
            "EVSIM_DRIVING_ADVISORY_INTERVAL": "driving_advisory_interval",
            "EVSIM_FATIGUE_INTERVAL": "fatigue_interval",
            "EVSIM_FATIGUE_POLL_INTERVAL": "fatigue_poll_interval",
            "EVSIM_FATIGUE_MIN_SPEED": "fatigue_min_speed",
            "EVSIM_FATIGUE_CONFIDENCE_THRESHOLD": "fatigue_confidence_threshold",
        }
        for env_key, field_name in _ENV_FLOAT_MAP.items():
            val = env.get(env_key)
            if val is not None and field_name not in overrides:
                config_kwargs[field_name] = _env_float(env_key, val)

        window_env = env.get("EVSIM_FATIGUE_WINDOW")
        if window_env is not None and "fatigue_window" not in overrides:
            config_kwargs["fatigue_window"] = int(_env_float("EVSIM_FATIGUE_WINDOW", window_env))

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
