"""Data models for pyevsim."""

from pyevsim._constants import DriveMode
from pyevsim.models._base import AdvisoryResponseModel, EvSimModel
from pyevsim.models.advisory import (
    ClimateSettings,
    DrivingRecommendation,
    DrivingRecommendationRequest,
    DrivingStyleClassification,
    DrivingStyleRequest,
    FatigueAssessment,
    FatigueRequest,
    HistoricalSample,
    RangePrediction,
    RangePredictionRequest,
    SohForecastItem,
    SohForecastRequest,
    WeatherConditions,
)
from pyevsim.models.commands import CommandRejection, CommandResult, Notice, NoticeSeverity
from pyevsim.models.state import (
    ChargingLog,
    ChargingState,
    OpenChargeSession,
    PedalInput,
    Profile,
    SohForecastPoint,
    SohHistoryEntry,
    TripSelector,
    VehicleSnapshot,
)
from pyevsim.models.weather import WeatherReading

__all__ = [
    "AdvisoryResponseModel",
    "ChargingLog",
    "ChargingState",
    "ClimateSettings",
    "CommandRejection",
    "CommandResult",
    "DriveMode",
    "DrivingRecommendation",
    "DrivingRecommendationRequest",
    "DrivingStyleClassification",
    "DrivingStyleRequest",
    "EvSimModel",
    "FatigueAssessment",
    "FatigueRequest",
    "HistoricalSample",
    "Notice",
    "NoticeSeverity",
    "OpenChargeSession",
    "PedalInput",
    "Profile",
    "RangePrediction",
    "RangePredictionRequest",
    "SohForecastItem",
    "SohForecastPoint",
    "SohForecastRequest",
    "SohHistoryEntry",
    "TripSelector",
    "VehicleSnapshot",
    "WeatherConditions",
    "WeatherReading",
]
