"""Per-field merge policy.

Each snapshot field has an explicit merge rule; anything not listed is
overwritten. Bounded histories and counters must never go through a blanket
overwrite, otherwise a careless writer silently loses their semantics.
"""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from enum import StrEnum
from typing import Any

from pyevsim._constants import (
    AC_TEMP_MAX,
    AC_TEMP_MIN,
    HISTORY_LIMITS,
    SOH_CEILING,
    SOH_FLOOR,
    mode_max_speed,
)
from pyevsim._normalize import clamp
from pyevsim.models.state import VehicleSnapshot


class MergeRule(StrEnum):
    OVERWRITE = "overwrite"
    PREPEND = "prepend"
    APPEND = "append"
    ACCUMULATE = "accumulate"


_FIELD_RULES: dict[str, MergeRule] = {
    # Most-recent-first histories
    "speed_history": MergeRule.PREPEND,
    "acceleration_history": MergeRule.PREPEND,
    "power_history": MergeRule.PREPEND,
    "drive_mode_history": MergeRule.PREPEND,
    # Chronological, drop-oldest
    "soh_history": MergeRule.APPEND,
    "charging_logs": MergeRule.APPEND,
    # Deltas
    "odometer": MergeRule.ACCUMULATE,
    "trip_a": MergeRule.ACCUMULATE,
    "trip_b": MergeRule.ACCUMULATE,
    "equivalent_full_cycles": MergeRule.ACCUMULATE,
    "harsh_brake_events": MergeRule.ACCUMULATE,
    "harsh_accel_events": MergeRule.ACCUMULATE,
    "mode_distance_km": MergeRule.ACCUMULATE,
}


def merge_rule(field: str) -> MergeRule:
    return _FIELD_RULES.get(field, MergeRule.OVERWRITE)


def _as_items(value: Any) -> tuple[Any, ...]:
    if isinstance(value, Sequence) and not isinstance(value, str):
        return tuple(value)
    return (value,)


def _accumulate(current: Any, delta: Any) -> Any:
    if isinstance(current, Mapping):
        merged = dict(current)
        for key, value in dict(delta).items():
            merged[key] = _accumulate(merged.get(key, 0.0), value)
        return merged
    # Negative or non-finite deltas would move a monotonic counter backwards.
    if not isinstance(delta, (int, float)) or not math.isfinite(delta) or delta <= 0:
        return current
    return current + delta


def merge_value(field: str, current: Any, incoming: Any) -> Any:
    """Combine *incoming* with the *current* value of *field* per its rule."""
    rule = merge_rule(field)
    if rule is MergeRule.PREPEND:
        combined = _as_items(incoming) + tuple(current)
        return combined[: HISTORY_LIMITS[field]]
    if rule is MergeRule.APPEND:
        combined = tuple(current) + _as_items(incoming)
        limit = HISTORY_LIMITS[field]
        return combined[-limit:] if len(combined) > limit else combined
    if rule is MergeRule.ACCUMULATE:
        return _accumulate(current, incoming)
    return incoming


def enforce_invariants(previous: VehicleSnapshot | None, merged: dict[str, Any]) -> None:
    """Clamp *merged* (a field dict about to become the next snapshot) in place.

    *previous* is ``None`` when seeding a store: non-finite values then fall
    back to the field default and SOH is only clamped, not held monotonic.
    """
    for name, value in merged.items():
        if isinstance(value, float) and not math.isfinite(value):
            if previous is None:
                fallback = VehicleSnapshot.model_fields[name].get_default(call_default_factory=True)
            else:
                fallback = getattr(previous, name)
            merged[name] = fallback if fallback is None or math.isfinite(fallback) else 0.0

    merged["battery_soc"] = clamp(merged["battery_soc"], 0.0, 100.0)
    soh = clamp(merged["pack_soh"], SOH_FLOOR, SOH_CEILING)
    merged["pack_soh"] = soh if previous is None else min(previous.pack_soh, soh)
    merged["ac_temp"] = clamp(merged["ac_temp"], AC_TEMP_MIN, AC_TEMP_MAX)
    merged["range_km"] = max(0.0, merged["range_km"])
    merged["passengers"] = max(0, merged["passengers"])
    # No grace period after a drive-mode change.
    merged["speed"] = clamp(merged["speed"], 0.0, mode_max_speed(merged["drive_mode"]))

    for name, limit in HISTORY_LIMITS.items():
        value = merged[name]
        if len(value) > limit:
            merged[name] = tuple(value)[:limit] if merge_rule(name) is MergeRule.PREPEND else tuple(value)[-limit:]
