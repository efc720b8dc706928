from __future__ import annotations

import math

import pytest
from pydantic import ValidationError

from pyevsim._constants import HISTORY_LIMITS, DriveMode
from pyevsim.exceptions import StateUpdateError
from pyevsim.models.state import VehicleSnapshot
from pyevsim.state.events import StateUpdate, UpdateSource
from pyevsim.state.policy import MergeRule, merge_rule, merge_value
from pyevsim.state.store import SnapshotStore


def _tick(**data: object) -> StateUpdate:
    return StateUpdate(source=UpdateSource.TICK, data=data)


# ------------------------------------------------------------------
# Merge policy
# ------------------------------------------------------------------


def test_unlisted_fields_overwrite() -> None:
    assert merge_rule("speed") is MergeRule.OVERWRITE
    assert merge_value("speed", 10.0, 20.0) == 20.0


def test_prepend_places_latest_first_and_truncates() -> None:
    current = tuple(float(i) for i in range(HISTORY_LIMITS["speed_history"]))

    merged = merge_value("speed_history", current, [99.0])

    assert merged[0] == 99.0
    assert len(merged) == HISTORY_LIMITS["speed_history"]
    assert merged[-1] == current[-2]


def test_append_drops_oldest() -> None:
    limit = HISTORY_LIMITS["charging_logs"]
    merged = merge_value("charging_logs", tuple(range(limit)), [limit])

    assert merged == tuple(range(1, limit + 1))


def test_accumulate_ignores_negative_and_non_finite_deltas() -> None:
    assert merge_value("odometer", 10.0, 0.5) == 10.5
    assert merge_value("odometer", 10.0, -3.0) == 10.0
    assert merge_value("odometer", 10.0, math.inf) == 10.0


def test_accumulate_merges_mapping_per_key() -> None:
    merged = merge_value("mode_distance_km", {DriveMode.ECO: 1.0, DriveMode.CITY: 2.0}, {DriveMode.CITY: 0.5})

    assert merged == {DriveMode.ECO: 1.0, DriveMode.CITY: 2.5}


# ------------------------------------------------------------------
# Store
# ------------------------------------------------------------------


def test_partial_update_keeps_other_fields() -> None:
    store = SnapshotStore()
    store.apply(_tick(speed=12.0))
    store.apply(_tick(power=3.0))

    assert store.snapshot.speed == 12.0
    assert store.snapshot.power == 3.0


def test_replace_bypasses_accumulation() -> None:
    store = SnapshotStore()
    store.apply(_tick(trip_a=5.0))
    store.apply(StateUpdate(source=UpdateSource.COMMAND, replace={"trip_a": 0.0}))

    assert store.snapshot.trip_a == 0.0


def test_stale_epoch_is_discarded() -> None:
    store = SnapshotStore()
    captured = store.epoch
    store.advance_epoch()

    result = store.apply(
        StateUpdate(source=UpdateSource.ADVISORY, epoch=captured, data={"driving_style": "Aggressive"})
    )

    assert result is None
    assert store.snapshot.driving_style == "Balanced"


def test_current_epoch_is_applied() -> None:
    store = SnapshotStore()

    result = store.apply(
        StateUpdate(source=UpdateSource.ADVISORY, epoch=store.epoch, data={"driving_style": "Eco-friendly"})
    )

    assert result is not None
    assert result.driving_style == "Eco-friendly"


def test_closed_store_discards_updates() -> None:
    store = SnapshotStore()
    epoch = store.epoch
    store.close()

    assert store.apply(_tick(speed=5.0)) is None
    assert not store.is_current(epoch)
    assert store.snapshot.speed == 0.0


def test_unknown_field_raises() -> None:
    store = SnapshotStore()

    with pytest.raises(StateUpdateError):
        store.apply(_tick(warp_factor=9))


def test_invalid_snapshot_raises_state_update_error() -> None:
    store = SnapshotStore()

    with pytest.raises(StateUpdateError):
        store.apply(StateUpdate(source=UpdateSource.COMMAND, replace={"active_profile": "Nobody"}))


def test_overlapping_data_and_replace_rejected() -> None:
    with pytest.raises(ValueError):
        StateUpdate(source=UpdateSource.TICK, data={"speed": 1.0}, replace={"speed": 2.0})


def test_invariants_clamp_merged_values() -> None:
    store = SnapshotStore()
    store.apply(_tick(battery_soc=140.0, ac_temp=40.0, range_km=-5.0, speed=200.0))

    snapshot = store.snapshot
    assert snapshot.battery_soc == 100.0
    assert snapshot.ac_temp == 28.0
    assert snapshot.range_km == 0.0
    assert snapshot.speed == 45.0


def test_soh_never_increases() -> None:
    store = SnapshotStore(VehicleSnapshot.default().model_copy(update={"pack_soh": 95.0}))
    store.apply(_tick(pack_soh=99.0))

    assert store.snapshot.pack_soh == 95.0


def test_non_finite_values_keep_previous() -> None:
    store = SnapshotStore()
    store.apply(_tick(power=math.nan, recent_wh_per_km=math.inf))

    assert store.snapshot.power == 0.0
    assert store.snapshot.recent_wh_per_km == 158.33


def test_snapshot_rejects_out_of_range_values() -> None:
    with pytest.raises(ValidationError):
        VehicleSnapshot(battery_soc=150.0)
    with pytest.raises(ValidationError):
        VehicleSnapshot(pack_soh=50.0)
    with pytest.raises(ValidationError):
        VehicleSnapshot(ac_temp=35.0)
    with pytest.raises(ValidationError):
        VehicleSnapshot(speed=300.0)


def test_seeded_snapshot_is_clamped_into_range() -> None:
    seed = VehicleSnapshot.default().model_copy(
        update={"battery_soc": 150.0, "pack_soh": 50.0, "speed": 300.0, "ac_temp": 10.0}
    )

    store = SnapshotStore(seed)

    snapshot = store.snapshot
    assert snapshot.battery_soc == 100.0
    assert snapshot.pack_soh == 70.0
    assert snapshot.speed == 45.0
    assert snapshot.ac_temp == 18.0

    store.apply(_tick(pack_soh=69.0))
    assert store.snapshot.pack_soh == 70.0


def test_seeded_non_finite_value_falls_back_to_default() -> None:
    store = SnapshotStore(VehicleSnapshot.default().model_copy(update={"recent_wh_per_km": math.nan}))

    assert store.snapshot.recent_wh_per_km == 158.33
