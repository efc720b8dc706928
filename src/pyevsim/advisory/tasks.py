"""Throttled advisory tasks and their merge back into the snapshot.

Two independent tasks run beside the tick loop:

* the driving advisory (recommendation, driving style, dynamic range, SOH
  forecast), at most once per ``driving_advisory_interval``;
* the fatigue monitor, at most once per ``fatigue_interval``.

Both capture the store epoch before calling out and tag their update with
it, so a reply that lands after a profile switch or shutdown is dropped by
the store instead of being merged.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from typing import Any

from pyevsim._normalize import safe_float
from pyevsim.advisory.client import AdvisoryClient
from pyevsim.config import SimulationConfig
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
    SohForecastRequest,
)
from pyevsim.models.state import SohForecastPoint, VehicleSnapshot
from pyevsim.state.events import StateUpdate, UpdateSource
from pyevsim.state.store import SnapshotStore
from pyevsim.weather import WeatherCache

_logger = logging.getLogger(__name__)

_DEFAULT_FATIGUE_WARNING = "Driving patterns suggest fatigue. Consider taking a break."


def _within_window(last: float | None, now: float, window: float) -> bool:
    return last is not None and now - last < window


def _recommendation_fields(result: DrivingRecommendation) -> dict[str, Any]:
    return {
        "driving_recommendation": result.recommendation,
        "recommendation_justification": result.justification,
    }


def _style_fields(result: DrivingStyleClassification) -> dict[str, Any]:
    return {
        "driving_style": result.driving_style,
        "driving_style_recommendations": tuple(result.recommendations),
    }


def _range_fields(result: RangePrediction) -> dict[str, Any]:
    return {
        "predicted_dynamic_range": result.estimated_range,
        "range_confidence": result.confidence,
    }


def _forecast_fields(result: list[SohForecastPoint]) -> dict[str, Any]:
    return {"soh_forecast": tuple(result)}


_MERGERS: dict[str, Callable[[Any], dict[str, Any]]] = {
    "driving_recommendation": _recommendation_fields,
    "driving_style": _style_fields,
    "dynamic_range": _range_fields,
    "soh_forecast": _forecast_fields,
}


class AdvisoryScheduler:
    """Runs the advisory tasks against a :class:`SnapshotStore`."""

    def __init__(
        self,
        store: SnapshotStore,
        client: AdvisoryClient,
        config: SimulationConfig,
        *,
        weather: WeatherCache | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._store = store
        self._client = client
        self._config = config
        self._weather = weather if weather is not None else WeatherCache()
        self._clock = clock
        self._last_driving_advisory: float | None = None
        self._last_fatigue_check: float | None = None
        self._tasks: list[asyncio.Task[None]] = []

    @property
    def is_running(self) -> bool:
        return bool(self._tasks)

    # ------------------------------------------------------------------
    # Request builders
    # ------------------------------------------------------------------

    def build_driving_requests(self, snapshot: VehicleSnapshot) -> dict[str, Any]:
        """Requests for the driving-advisory cycle, keyed by endpoint name."""
        requests: dict[str, Any] = {
            "driving_recommendation": DrivingRecommendationRequest(
                driving_style=snapshot.driving_style,
                predicted_range=snapshot.predicted_dynamic_range,
                battery_soc=snapshot.battery_soc,
                ac_usage=snapshot.ac_on,
                drive_mode=str(snapshot.drive_mode),
                outside_temperature=snapshot.outside_temp,
            ),
            "driving_style": DrivingStyleRequest(
                speed_history=list(snapshot.speed_history),
                acceleration_history=list(snapshot.acceleration_history),
                drive_mode_history=[str(mode) for mode in snapshot.drive_mode_history],
                eco_score=snapshot.eco_score,
            ),
            "dynamic_range": RangePredictionRequest(
                driving_style=snapshot.driving_style,
                climate=ClimateSettings(
                    ac_usage=100.0 if snapshot.ac_on else 0.0,
                    temperature_setting=snapshot.ac_temp,
                ),
                weather=self._weather.conditions(snapshot.outside_temp),
                historical=[
                    HistoricalSample(speed=speed, power_consumption=power)
                    for speed, power in zip(snapshot.speed_history, snapshot.power_history, strict=False)
                ],
                battery_capacity=snapshot.pack_nominal_capacity_kwh,
                current_battery_level=snapshot.battery_soc,
            ),
        }
        if snapshot.soh_history:
            requests["soh_forecast"] = SohForecastRequest(historical_data=list(snapshot.soh_history))
        return requests

    def build_fatigue_request(self, snapshot: VehicleSnapshot) -> FatigueRequest:
        window = self._config.fatigue_window
        return FatigueRequest(
            speed_history=list(snapshot.speed_history[:window]),
            acceleration_history=list(snapshot.acceleration_history[:window]),
            harsh_braking_events=snapshot.harsh_brake_events,
            harsh_acceleration_events=snapshot.harsh_accel_events,
        )

    def _call(self, name: str, request: Any) -> Awaitable[Any]:
        if name == "driving_recommendation":
            return self._client.get_driving_recommendation(request)
        if name == "driving_style":
            return self._client.classify_driving_style(request)
        if name == "dynamic_range":
            return self._client.predict_range(request)
        return self._client.forecast_soh(request)

    # ------------------------------------------------------------------
    # Tasks
    # ------------------------------------------------------------------

    async def run_driving_advisory(self) -> frozenset[str]:
        """Run one driving-advisory cycle.

        Returns the snapshot fields that were merged (empty when the cycle was
        throttled, skipped, failed entirely or discarded as stale).
        """
        now = self._clock()
        if _within_window(self._last_driving_advisory, now, self._config.driving_advisory_interval):
            _logger.debug("Driving advisory throttled")
            return frozenset()

        snapshot = self._store.snapshot
        # Unreachable for a validated snapshot; marks where an unusable reading skips the cycle.
        if safe_float(snapshot.battery_soc) is None or safe_float(snapshot.outside_temp) is None:
            _logger.debug("Driving advisory skipped: no usable SOC or outside temperature")
            return frozenset()

        self._last_driving_advisory = now
        epoch = self._store.epoch
        requests = self.build_driving_requests(snapshot)
        names = list(requests)
        results = await asyncio.gather(
            *(self._call(name, requests[name]) for name in names),
            return_exceptions=True,
        )

        data: dict[str, Any] = {}
        for name, result in zip(names, results, strict=True):
            if isinstance(result, BaseException):
                if not isinstance(result, Exception):
                    raise result
                _logger.warning("Advisory endpoint %s failed: %s", name, result)
                continue
            data.update(_MERGERS[name](result))

        if not data:
            return frozenset()
        merged = self._store.apply(StateUpdate(source=UpdateSource.ADVISORY, epoch=epoch, data=data))
        if merged is None:
            _logger.debug("Driving advisory result discarded (stale)")
            return frozenset()
        return frozenset(data)

    async def run_fatigue_check(self) -> FatigueAssessment | None:
        """Run one fatigue-monitor cycle; returns the assessment that was merged."""
        now = self._clock()
        if _within_window(self._last_fatigue_check, now, self._config.fatigue_interval):
            _logger.debug("Fatigue check throttled")
            return None

        snapshot = self._store.snapshot
        if snapshot.speed < self._config.fatigue_min_speed:
            if snapshot.fatigue_warning is not None:
                self._store.apply(
                    StateUpdate(
                        source=UpdateSource.ADVISORY,
                        data={"fatigue_warning": None, "fatigue_level": 0.0},
                    )
                )
            return None

        self._last_fatigue_check = now
        epoch = self._store.epoch
        request = self.build_fatigue_request(snapshot)
        try:
            assessment = await self._client.monitor_fatigue(request)
        except Exception as exc:
            _logger.warning("Fatigue monitor failed: %s", exc)
            _logger.debug("Fatigue monitor failure details", exc_info=True)
            return None

        level = assessment.confidence if assessment.is_fatigued else 1.0 - assessment.confidence
        current = self._store.snapshot
        if assessment.is_fatigued and assessment.confidence > self._config.fatigue_confidence_threshold:
            update = StateUpdate(
                source=UpdateSource.ADVISORY,
                epoch=epoch,
                data={
                    "fatigue_warning": assessment.reasoning or _DEFAULT_FATIGUE_WARNING,
                    "fatigue_level": level,
                },
                # Consume only the events reported in the request.
                replace={
                    "harsh_brake_events": max(0, current.harsh_brake_events - request.harsh_braking_events),
                    "harsh_accel_events": max(0, current.harsh_accel_events - request.harsh_acceleration_events),
                },
            )
        else:
            update = StateUpdate(
                source=UpdateSource.ADVISORY,
                epoch=epoch,
                data={"fatigue_warning": None, "fatigue_level": level},
            )

        if self._store.apply(update) is None:
            _logger.debug("Fatigue result discarded (stale)")
            return None
        return assessment

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Start both periodic tasks on the running loop."""
        if self._tasks:
            return
        self._tasks = [
            asyncio.create_task(
                self._periodic(self.run_driving_advisory, self._config.driving_advisory_interval),
                name="pyevsim-driving-advisory",
            ),
            asyncio.create_task(
                self._periodic(self.run_fatigue_check, self._config.fatigue_poll_interval),
                name="pyevsim-fatigue-monitor",
            ),
        ]

    async def stop(self) -> None:
        """Cancel both periodic tasks and wait for them to finish."""
        tasks, self._tasks = self._tasks, []
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

    async def _periodic(self, job: Callable[[], Awaitable[Any]], interval: float) -> None:
        while True:
            try:
                await job()
            except Exception:
                _logger.warning("Advisory task failed", exc_info=True)
            await asyncio.sleep(interval)
