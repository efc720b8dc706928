"""Typed client for the advisory service endpoints."""

from __future__ import annotations

from typing import Any, TypeVar

from pydantic import BaseModel, TypeAdapter, ValidationError

from pyevsim._constants import (
    ENDPOINT_DRIVING_RECOMMENDATION,
    ENDPOINT_DRIVING_STYLE,
    ENDPOINT_FATIGUE,
    ENDPOINT_RANGE,
    ENDPOINT_SOH_FORECAST,
)
from pyevsim.advisory._transport import AdvisoryTransport
from pyevsim.exceptions import AdvisoryResponseError
from pyevsim.models._base import EvSimModel
from pyevsim.models.advisory import (
    DrivingRecommendation,
    DrivingRecommendationRequest,
    DrivingStyleClassification,
    DrivingStyleRequest,
    FatigueAssessment,
    FatigueRequest,
    RangePrediction,
    RangePredictionRequest,
    SohForecastItem,
    SohForecastRequest,
)
from pyevsim.models.state import SohForecastPoint

TModel = TypeVar("TModel", bound=BaseModel)

_SOH_FORECAST_ADAPTER: TypeAdapter[list[SohForecastItem]] = TypeAdapter(list[SohForecastItem])


def _parse(model: type[TModel], endpoint: str, payload: Any) -> TModel:
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise AdvisoryResponseError(f"Unexpected response from {endpoint}: {exc}", endpoint=endpoint) from exc


class AdvisoryClient:
    """One coroutine per advisory endpoint.

    Every method raises :class:`~pyevsim.exceptions.AdvisoryError` (transport
    or schema failure) instead of returning a partial result.
    """

    def __init__(self, transport: AdvisoryTransport) -> None:
        self._transport = transport

    async def _post(self, endpoint: str, request: EvSimModel) -> Any:
        return await self._transport.post_json(endpoint, request.to_payload())

    async def get_driving_recommendation(self, request: DrivingRecommendationRequest) -> DrivingRecommendation:
        raw = await self._post(ENDPOINT_DRIVING_RECOMMENDATION, request)
        return _parse(DrivingRecommendation, ENDPOINT_DRIVING_RECOMMENDATION, raw)

    async def classify_driving_style(self, request: DrivingStyleRequest) -> DrivingStyleClassification:
        raw = await self._post(ENDPOINT_DRIVING_STYLE, request)
        return _parse(DrivingStyleClassification, ENDPOINT_DRIVING_STYLE, raw)

    async def predict_range(self, request: RangePredictionRequest) -> RangePrediction:
        raw = await self._post(ENDPOINT_RANGE, request)
        return _parse(RangePrediction, ENDPOINT_RANGE, raw)

    async def forecast_soh(self, request: SohForecastRequest) -> list[SohForecastPoint]:
        """Forecast points ordered by odometer."""
        raw = await self._post(ENDPOINT_SOH_FORECAST, request)
        try:
            items = _SOH_FORECAST_ADAPTER.validate_python(raw)
        except ValidationError as exc:
            raise AdvisoryResponseError(
                f"Unexpected response from {ENDPOINT_SOH_FORECAST}: {exc}",
                endpoint=ENDPOINT_SOH_FORECAST,
            ) from exc
        points = [SohForecastPoint(odometer=item.odometer, soh=item.soh) for item in items]
        return sorted(points, key=lambda point: point.odometer)

    async def monitor_fatigue(self, request: FatigueRequest) -> FatigueAssessment:
        raw = await self._post(ENDPOINT_FATIGUE, request)
        return _parse(FatigueAssessment, ENDPOINT_FATIGUE, raw)
