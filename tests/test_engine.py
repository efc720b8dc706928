from __future__ import annotations

import pytest

from pyevsim import commands, engine
from pyevsim._constants import DriveMode
from pyevsim.config import VehicleParameters
from pyevsim.models.state import PedalInput, TripSelector, VehicleSnapshot
from pyevsim.state.events import UpdateSource
from pyevsim.state.store import SnapshotStore

VEHICLE = VehicleParameters()


def _step(store: SnapshotStore, dt: float = 1.0, now: float = 1.0) -> VehicleSnapshot:
    update = engine.advance(store.snapshot, dt, now, VEHICLE)
    assert update is not None
    result = store.apply(update)
    assert result is not None
    return result


def test_zero_dt_produces_no_update() -> None:
    assert engine.advance(VehicleSnapshot.default(), 0.0, 0.0, VEHICLE) is None
    assert engine.advance(VehicleSnapshot.default(), -1.0, 0.0, VEHICLE) is None


def test_tick_update_is_unconditional() -> None:
    update = engine.advance(VehicleSnapshot.default(), 1.0, 1.0, VEHICLE)

    assert update is not None
    assert update.source is UpdateSource.TICK
    assert update.epoch is None


def test_stationary_vehicle_draws_no_power() -> None:
    store = SnapshotStore(VehicleSnapshot.default().model_copy(update={"ac_on": True}))

    snapshot = _step(store)

    assert snapshot.power == 0.0
    assert snapshot.battery_soc == 100.0


def test_cruising_drains_battery_and_advances_odometry() -> None:
    store = SnapshotStore(VehicleSnapshot.default().model_copy(update={"speed": 40.0, "battery_soc": 80.0}))

    snapshot = _step(store)

    assert snapshot.power > 0
    assert snapshot.battery_soc < 80.0
    assert snapshot.odometer > 0
    assert snapshot.trip_a == snapshot.odometer
    assert snapshot.trip_b == 0.0
    assert snapshot.mode_distance_km[DriveMode.ECO] == pytest.approx(snapshot.odometer)
    assert snapshot.equivalent_full_cycles > 0


def test_active_trip_receives_distance() -> None:
    store = SnapshotStore(
        VehicleSnapshot.default().model_copy(update={"speed": 40.0, "active_trip": TripSelector.B})
    )

    snapshot = _step(store)

    assert snapshot.trip_a == 0.0
    assert snapshot.trip_b == pytest.approx(snapshot.odometer)


def test_histories_are_latest_first() -> None:
    store = SnapshotStore(VehicleSnapshot.default().model_copy(update={"pedal": PedalInput.ACCELERATE}))

    first = _step(store, now=1.0)
    second = _step(store, now=2.0)

    assert second.speed_history[:2] == (second.speed, first.speed)
    assert second.acceleration_history[0] == second.acceleration
    assert second.power_history[0] == second.power
    assert second.drive_mode_history[0] is DriveMode.ECO
    assert second.last_update == 2.0


def test_harsh_braking_counted_once_per_crossing() -> None:
    store = SnapshotStore(
        VehicleSnapshot.default().model_copy(update={"speed": 40.0, "acceleration": -2.95, "pedal": PedalInput.BRAKE})
    )

    _step(store)
    snapshot = _step(store)

    assert snapshot.acceleration < -3.0
    assert snapshot.harsh_brake_events == 1


def test_harsh_acceleration_counted() -> None:
    store = SnapshotStore(
        VehicleSnapshot.default().model_copy(
            update={
                "speed": 40.0,
                "acceleration": 2.45,
                "pedal": PedalInput.ACCELERATE,
                "drive_mode": DriveMode.SPORTS,
            }
        )
    )

    snapshot = _step(store)

    assert snapshot.harsh_accel_events == 1


def test_charging_tick_adds_soc_and_holds_vehicle() -> None:
    store = SnapshotStore(VehicleSnapshot.default().model_copy(update={"battery_soc": 50.0}))
    store.apply(commands.toggle_charging(store.snapshot, now=0.0).update)  # type: ignore[arg-type]
    store.apply(commands.set_pedal(store.snapshot, "accelerate").update)  # type: ignore[arg-type]

    snapshot = _step(store)

    assert snapshot.speed == 0.0
    assert snapshot.power == -VEHICLE.charge_rate_kw
    assert snapshot.battery_soc == pytest.approx(50.0 + 22.0 / 75.0 * 100.0 / 3600.0)


def test_soh_sample_recorded_after_fifty_km() -> None:
    store = SnapshotStore(VehicleSnapshot.default().model_copy(update={"speed": 45.0, "odometer": 49.995}))

    snapshot = _step(store)

    assert len(snapshot.soh_history) == 2
    assert snapshot.soh_history[-1].odometer == pytest.approx(snapshot.odometer)
