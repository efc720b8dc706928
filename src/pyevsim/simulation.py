"""High-level async facade over the simulation core."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable
from typing import Any

import aiohttp

from pyevsim import commands, engine
from pyevsim._constants import DriveMode
from pyevsim.advisory._transport import HttpAdvisoryTransport
from pyevsim.advisory.client import AdvisoryClient
from pyevsim.advisory.tasks import AdvisoryScheduler
from pyevsim.clock import TickClock, WallClock
from pyevsim.commands import CommandOutcome
from pyevsim.config import SimulationConfig
from pyevsim.exceptions import SimulationNotRunningError
from pyevsim.models.commands import CommandResult, Notice
from pyevsim.models.state import PedalInput, TripSelector, VehicleSnapshot
from pyevsim.models.weather import WeatherReading
from pyevsim.state.events import StateUpdate, UpdateSource
from pyevsim.state.store import SnapshotStore
from pyevsim.weather import WeatherCache

_logger = logging.getLogger(__name__)


class VehicleSimulation:
    """Single-vehicle EV simulation.

    Ticks and commands are synchronous and can be used directly. Entering the
    async context opens the advisory client; :meth:`start` then runs the tick
    loop and the advisory tasks in the background.

    Usage::

        async with VehicleSimulation(config) as sim:
            sim.start()
            sim.set_pedal("accelerate")
            await asyncio.sleep(5)
            print(sim.snapshot.speed)
    """

    def __init__(
        self,
        config: SimulationConfig | None = None,
        *,
        clock: TickClock | None = None,
        initial: VehicleSnapshot | None = None,
        session: aiohttp.ClientSession | None = None,
        advisory_client: AdvisoryClient | None = None,
        on_notice: Callable[[Notice], None] | None = None,
        on_snapshot: Callable[[VehicleSnapshot], None] | None = None,
    ) -> None:
        self._config = config if config is not None else SimulationConfig()
        self._clock: TickClock = clock if clock is not None else WallClock()
        self._store = SnapshotStore(initial if initial is not None else VehicleSnapshot.default(now=self._clock.now()))
        self._weather = WeatherCache()
        self._external_session = session is not None
        self._http_session = session
        self._advisory_client = advisory_client
        self._scheduler: AdvisoryScheduler | None = None
        self._tick_task: asyncio.Task[None] | None = None
        self._on_notice = on_notice
        self._on_snapshot = on_snapshot

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> VehicleSimulation:
        if self._config.advisory_enabled:
            if self._advisory_client is None:
                if self._http_session is None:
                    self._http_session = aiohttp.ClientSession()
                self._advisory_client = AdvisoryClient(HttpAdvisoryTransport(self._config, self._http_session))
            self._scheduler = AdvisoryScheduler(
                self._store,
                self._advisory_client,
                self._config,
                weather=self._weather,
                clock=self._clock.now,
            )
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.stop()
        self._store.close()
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
        self._scheduler = None

    def start(self) -> None:
        """Run the tick loop and advisory tasks on the running event loop."""
        self._require_open()
        if self._tick_task is None:
            self._tick_task = asyncio.create_task(self._run_tick_loop(), name="pyevsim-tick")
        if self._scheduler is not None:
            self._scheduler.start()

    async def stop(self) -> None:
        """Stop the background loops. The snapshot stays readable."""
        task, self._tick_task = self._tick_task, None
        if task is not None:
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
        if self._scheduler is not None:
            await self._scheduler.stop()

    # ------------------------------------------------------------------
    # State access
    # ------------------------------------------------------------------

    @property
    def config(self) -> SimulationConfig:
        return self._config

    @property
    def snapshot(self) -> VehicleSnapshot:
        return self._store.snapshot

    @property
    def store(self) -> SnapshotStore:
        return self._store

    @property
    def advisory(self) -> AdvisoryScheduler | None:
        """The advisory scheduler, when advisory is enabled and the context is open."""
        return self._scheduler

    @property
    def weather(self) -> WeatherCache:
        return self._weather

    def _require_open(self) -> None:
        if self._store.closed:
            raise SimulationNotRunningError("Simulation has been shut down")

    # ------------------------------------------------------------------
    # Ticks
    # ------------------------------------------------------------------

    def tick(self) -> VehicleSnapshot:
        """Advance the simulation by the time elapsed on the clock."""
        self._require_open()
        dt = self._clock.tick()
        update = engine.advance(self._store.snapshot, dt, self._clock.now(), self._config.vehicle)
        if update is None:
            _logger.debug("Skipping tick with dt=%s", dt)
            return self._store.snapshot

        snapshot = self._store.apply(update)
        if snapshot is None:
            return self._store.snapshot
        if self._on_snapshot is not None:
            try:
                self._on_snapshot(snapshot)
            except Exception:
                _logger.debug("on_snapshot callback failed", exc_info=True)
        return snapshot

    def run_for(self, seconds: float) -> VehicleSnapshot:
        """Tick repeatedly until *seconds* of clock time have passed (for simulated clocks)."""
        self._require_open()
        deadline = self._clock.now() + seconds
        snapshot = self._store.snapshot
        while self._clock.now() < deadline:
            snapshot = self.tick()
        return snapshot

    async def _run_tick_loop(self) -> None:
        interval = self._config.tick_interval
        while True:
            try:
                self.tick()
            except SimulationNotRunningError:
                return
            except Exception:
                _logger.warning("Tick failed", exc_info=True)
            await asyncio.sleep(interval)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def _execute(self, outcome: CommandOutcome) -> CommandResult:
        if outcome.advances_epoch:
            self._store.advance_epoch()
        if outcome.update is not None:
            self._store.apply(outcome.update)
        notice = outcome.result.notice
        if notice is not None and self._on_notice is not None:
            try:
                self._on_notice(notice)
            except Exception:
                _logger.debug("on_notice callback failed", exc_info=True)
        return outcome.result

    def _command(self, build: Callable[..., CommandOutcome], *args: Any) -> CommandResult:
        self._require_open()
        return self._execute(build(self._store.snapshot, *args))

    def set_pedal(self, pedal: PedalInput | str) -> CommandResult:
        return self._command(commands.set_pedal, pedal)

    def set_drive_mode(self, mode: DriveMode | str) -> CommandResult:
        return self._command(commands.set_drive_mode, mode)

    def toggle_ac(self) -> CommandResult:
        return self._command(commands.toggle_ac)

    def set_ac_temp(self, celsius: float) -> CommandResult:
        return self._command(commands.set_ac_temp, celsius)

    def set_passengers(self, count: int) -> CommandResult:
        return self._command(commands.set_passengers, count)

    def toggle_goods_in_boot(self) -> CommandResult:
        return self._command(commands.toggle_goods_in_boot)

    def toggle_charging(self) -> CommandResult:
        return self._command(commands.toggle_charging, self._clock.now())

    def reset_trip(self) -> CommandResult:
        return self._command(commands.reset_trip)

    def set_active_trip(self, trip: TripSelector | str) -> CommandResult:
        return self._command(commands.set_active_trip, trip)

    def switch_profile(self, name: str) -> CommandResult:
        return self._command(commands.switch_profile, name)

    def add_profile(self, name: str) -> CommandResult:
        return self._command(commands.add_profile, name)

    def delete_profile(self, name: str) -> CommandResult:
        return self._command(commands.delete_profile, name)

    # ------------------------------------------------------------------
    # Weather
    # ------------------------------------------------------------------

    def update_weather(self, reading: WeatherReading | dict[str, Any]) -> WeatherReading | None:
        """Store a weather reading and mirror its temperature into the snapshot.

        Accepts a parsed :class:`WeatherReading` or a raw OpenWeather-style
        payload. Malformed payloads are logged and ignored.
        """
        self._require_open()
        if isinstance(reading, WeatherReading):
            self._weather.update(reading)
            parsed: WeatherReading | None = reading
        else:
            parsed = self._weather.update_from_payload(reading)
        if parsed is None:
            return None
        self._store.apply(StateUpdate(source=UpdateSource.WEATHER, data={"outside_temp": parsed.temperature}))
        return parsed
