"""Request and response schemas for the external advisory service.

Wire keys follow the advisory service's camelCase contract; a few keys do not
follow the generated alias (``batterySOC``, the nested range-prediction
sections) and carry an explicit alias.
"""

from __future__ import annotations

from pydantic import Field

from pyevsim.models._base import AdvisoryResponseModel, EvSimModel
from pyevsim.models.state import SohHistoryEntry

# ---------------------------------------------------------------------------
# Driving recommendation
# ---------------------------------------------------------------------------


class DrivingRecommendationRequest(EvSimModel):
    driving_style: str
    predicted_range: float
    battery_soc: float = Field(alias="batterySOC")
    ac_usage: bool
    drive_mode: str
    outside_temperature: float


class DrivingRecommendation(AdvisoryResponseModel):
    recommendation: str
    justification: str = ""


# ---------------------------------------------------------------------------
# Driving-style classification
# ---------------------------------------------------------------------------


class DrivingStyleRequest(EvSimModel):
    speed_history: list[float]
    acceleration_history: list[float]
    drive_mode_history: list[str]
    eco_score: float


class DrivingStyleClassification(AdvisoryResponseModel):
    driving_style: str
    recommendations: list[str] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Dynamic range prediction
# ---------------------------------------------------------------------------


class ClimateSettings(EvSimModel):
    ac_usage: float = Field(ge=0, le=100)
    """A/C usage percentage (0-100)."""
    temperature_setting: float


class WeatherConditions(EvSimModel):
    temperature: float
    precipitation: str = "none"
    wind_speed: float = 0.0
    """Wind speed in km/h."""


class HistoricalSample(EvSimModel):
    speed: float
    power_consumption: float


class RangePredictionRequest(EvSimModel):
    driving_style: str
    climate: ClimateSettings = Field(alias="climateControlSettings")
    weather: WeatherConditions = Field(alias="weatherData")
    historical: list[HistoricalSample] = Field(default_factory=list, alias="historicalData")
    battery_capacity: float
    current_battery_level: float


class RangePrediction(AdvisoryResponseModel):
    estimated_range: float = Field(ge=0)
    confidence: float = Field(ge=0, le=1)


# ---------------------------------------------------------------------------
# SOH forecast
# ---------------------------------------------------------------------------


class SohForecastRequest(EvSimModel):
    historical_data: list[SohHistoryEntry] = Field(min_length=1)


class SohForecastItem(AdvisoryResponseModel):
    odometer: float
    soh: float


# ---------------------------------------------------------------------------
# Fatigue monitor
# ---------------------------------------------------------------------------


class FatigueRequest(EvSimModel):
    speed_history: list[float]
    acceleration_history: list[float]
    harsh_braking_events: int = 0
    harsh_acceleration_events: int = 0


class FatigueAssessment(AdvisoryResponseModel):
    is_fatigued: bool
    confidence: float = Field(ge=0, le=1)
    reasoning: str = ""
