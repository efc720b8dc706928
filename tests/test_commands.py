from __future__ import annotations

import pytest

from pyevsim import commands
from pyevsim._constants import DriveMode
from pyevsim.models.commands import CommandRejection, NoticeSeverity
from pyevsim.models.state import OpenChargeSession, PedalInput, TripSelector, VehicleSnapshot
from pyevsim.state.store import SnapshotStore


def _apply(store: SnapshotStore, outcome: commands.CommandOutcome) -> None:
    if outcome.advances_epoch:
        store.advance_epoch()
    if outcome.update is not None:
        store.apply(outcome.update)


def test_controls_overwrite_inputs() -> None:
    store = SnapshotStore()
    _apply(store, commands.set_pedal(store.snapshot, "accelerate"))
    _apply(store, commands.set_drive_mode(store.snapshot, DriveMode.SPORTS))
    _apply(store, commands.toggle_ac(store.snapshot))
    _apply(store, commands.set_passengers(store.snapshot, 3))
    _apply(store, commands.toggle_goods_in_boot(store.snapshot))

    snapshot = store.snapshot
    assert snapshot.pedal is PedalInput.ACCELERATE
    assert snapshot.drive_mode is DriveMode.SPORTS
    assert snapshot.ac_on is True
    assert snapshot.passengers == 3
    assert snapshot.goods_in_boot is True


def test_unknown_pedal_value_raises() -> None:
    with pytest.raises(ValueError):
        commands.set_pedal(VehicleSnapshot.default(), "launch")


@pytest.mark.parametrize(("requested", "expected"), [(12.0, 18.0), (22.5, 22.5), (35.0, 28.0)])
def test_ac_temperature_clamped(requested: float, expected: float) -> None:
    outcome = commands.set_ac_temp(VehicleSnapshot.default(), requested)

    assert outcome.update is not None
    assert outcome.update.replace["ac_temp"] == expected


def test_charging_rejected_while_moving() -> None:
    snapshot = VehicleSnapshot.default().model_copy(update={"speed": 20.0})

    outcome = commands.toggle_charging(snapshot, now=1.0)

    assert outcome.update is None
    assert not outcome.result.accepted
    assert outcome.result.rejection is CommandRejection.VEHICLE_MOVING
    assert outcome.result.notice is not None
    assert outcome.result.notice.title == "Cannot start charging"
    assert outcome.result.notice.severity is NoticeSeverity.DESTRUCTIVE


def test_charging_toggle_closes_open_session() -> None:
    snapshot = VehicleSnapshot.default().model_copy(
        update={
            "battery_soc": 60.0,
            "is_charging": True,
            "last_charge_log": OpenChargeSession(start_time=0.0, start_soc=50.0),
        }
    )
    store = SnapshotStore(snapshot)

    _apply(store, commands.toggle_charging(store.snapshot, now=30.0))

    assert store.snapshot.is_charging is False
    assert store.snapshot.last_charge_log is None
    assert len(store.snapshot.charging_logs) == 1


def test_reset_trip_only_clears_active_trip() -> None:
    store = SnapshotStore(VehicleSnapshot.default().model_copy(update={"trip_a": 4.0, "trip_b": 9.0}))
    _apply(store, commands.set_active_trip(store.snapshot, "B"))
    _apply(store, commands.reset_trip(store.snapshot))

    assert store.snapshot.active_trip is TripSelector.B
    assert store.snapshot.trip_a == 4.0
    assert store.snapshot.trip_b == 0.0


# ------------------------------------------------------------------
# Profiles
# ------------------------------------------------------------------


def test_switch_profile_applies_settings_and_advances_epoch() -> None:
    store = SnapshotStore()

    outcome = commands.switch_profile(store.snapshot, "Chloe Ray")
    _apply(store, outcome)

    assert outcome.advances_epoch
    assert store.epoch == 1
    assert store.snapshot.active_profile == "Chloe Ray"
    assert store.snapshot.drive_mode is DriveMode.SPORTS
    assert store.snapshot.ac_temp == 24.0
    assert outcome.result.notice is not None
    assert outcome.result.notice.title == "Switched to Chloe Ray's profile."


def test_switch_to_unknown_profile_rejected() -> None:
    outcome = commands.switch_profile(VehicleSnapshot.default(), "Nobody")

    assert outcome.result.rejection is CommandRejection.UNKNOWN_PROFILE
    assert outcome.update is None


def test_add_profile_defaults() -> None:
    store = SnapshotStore()
    _apply(store, commands.add_profile(store.snapshot, "  Dana  "))

    profile = store.snapshot.profiles["Dana"]
    assert profile.drive_mode is DriveMode.ECO
    assert profile.ac_temp == 22.0


@pytest.mark.parametrize(
    ("name", "rejection"),
    [("", CommandRejection.EMPTY_NAME), ("   ", CommandRejection.EMPTY_NAME), ("Alex Doe", CommandRejection.DUPLICATE_PROFILE)],
)
def test_add_profile_rejections(name: str, rejection: CommandRejection) -> None:
    outcome = commands.add_profile(VehicleSnapshot.default(), name)

    assert outcome.result.rejection is rejection


def test_delete_active_profile_reassigns_first_remaining() -> None:
    store = SnapshotStore()

    outcome = commands.delete_profile(store.snapshot, "Pritesh")
    _apply(store, outcome)

    assert outcome.advances_epoch
    assert "Pritesh" not in store.snapshot.profiles
    assert store.snapshot.active_profile == "Alex Doe"


def test_delete_inactive_profile_keeps_epoch() -> None:
    store = SnapshotStore()

    outcome = commands.delete_profile(store.snapshot, "Ben Smith")
    _apply(store, outcome)

    assert not outcome.advances_epoch
    assert store.snapshot.active_profile == "Pritesh"
    assert store.epoch == 0


def test_last_profile_cannot_be_deleted() -> None:
    store = SnapshotStore()
    for name in ("Alex Doe", "Ben Smith", "Chloe Ray"):
        _apply(store, commands.delete_profile(store.snapshot, name))

    outcome = commands.delete_profile(store.snapshot, "Pritesh")

    assert outcome.result.rejection is CommandRejection.LAST_PROFILE
    assert list(store.snapshot.profiles) == ["Pritesh"]
