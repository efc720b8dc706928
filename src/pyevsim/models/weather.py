"""Weather reading model.

Parsed from an OpenWeather-style current-weather payload::

    {"weather": [{"main": "Rain"}], "main": {"temp": 12.3}, "wind": {"speed": 4.0}}

Wind speed arrives in m/s and is stored in km/h.
"""

from __future__ import annotations

from typing import Any

from pydantic import model_validator

from pyevsim._normalize import safe_float
from pyevsim.models._base import EvSimModel

_MS_TO_KMH = 3.6


class WeatherReading(EvSimModel):
    temperature: float
    precipitation: str = "none"
    wind_speed_kmh: float = 0.0

    @model_validator(mode="before")
    @classmethod
    def _unwrap_openweather(cls, values: Any) -> Any:
        if not isinstance(values, dict) or "main" not in values:
            return values
        main = values.get("main")
        temperature = safe_float(main.get("temp")) if isinstance(main, dict) else None

        precipitation = "none"
        conditions = values.get("weather")
        if isinstance(conditions, list) and conditions and isinstance(conditions[0], dict):
            label = conditions[0].get("main")
            if isinstance(label, str) and label.strip():
                precipitation = label.strip().lower()

        wind = values.get("wind")
        wind_ms = safe_float(wind.get("speed")) if isinstance(wind, dict) else None

        return {
            "temperature": temperature,
            "precipitation": precipitation,
            "wind_speed_kmh": (wind_ms or 0.0) * _MS_TO_KMH,
        }
