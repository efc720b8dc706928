"""Latest-value holder for the external weather collaborator.

Weather arrives on its own slow refresh cycle. The simulation only ever reads
whatever reading is newest and never waits for one.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from pyevsim.models.advisory import WeatherConditions
from pyevsim.models.weather import WeatherReading

_logger = logging.getLogger(__name__)


class WeatherCache:
    def __init__(self, initial: WeatherReading | None = None) -> None:
        self._latest = initial

    @property
    def latest(self) -> WeatherReading | None:
        return self._latest

    def update(self, reading: WeatherReading) -> None:
        self._latest = reading

    def update_from_payload(self, payload: dict[str, Any]) -> WeatherReading | None:
        """Parse an OpenWeather-style payload; malformed payloads keep the previous reading."""
        try:
            reading = WeatherReading.model_validate(payload)
        except ValidationError:
            _logger.warning("Ignoring malformed weather payload", exc_info=True)
            return None
        self._latest = reading
        return reading

    def conditions(self, fallback_temperature: float) -> WeatherConditions:
        """Weather section of a range-prediction request."""
        reading = self._latest
        if reading is None:
            return WeatherConditions(temperature=fallback_temperature)
        return WeatherConditions(
            temperature=reading.temperature,
            precipitation=reading.precipitation,
            wind_speed=reading.wind_speed_kmh,
        )
