"""Battery degradation model."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

from pyevsim._constants import SOH_CEILING, SOH_FLOOR, SOH_SAMPLE_DISTANCE_KM, SOH_WEAR_PER_SOC_PERCENT, DriveMode
from pyevsim.models.state import SohHistoryEntry, VehicleSnapshot


@dataclass(frozen=True)
class DegradationStep:
    soh: float
    cycle_delta: float


def degrade(soh: float, soc_delta: float) -> DegradationStep:
    """Cycling wear for one tick; SOH never rises and never drops below the floor."""
    throughput = abs(soc_delta)
    worn = max(SOH_FLOOR, soh - throughput * SOH_WEAR_PER_SOC_PERCENT)
    return DegradationStep(soh=min(soh, SOH_CEILING, worn), cycle_delta=throughput / 100.0)


def mode_mix(mode_distance_km: Mapping[DriveMode, float]) -> tuple[float, float, float]:
    """Eco/City/Sports share of distance driven, in percent."""
    total = sum(max(0.0, value) for value in mode_distance_km.values())
    if total <= 0:
        return 100.0, 0.0, 0.0
    eco, city, sports = (
        max(0.0, mode_distance_km.get(mode, 0.0)) / total * 100.0
        for mode in (DriveMode.ECO, DriveMode.CITY, DriveMode.SPORTS)
    )
    return eco, city, sports


def maybe_sample(
    snapshot: VehicleSnapshot,
    *,
    odometer: float,
    cycles: float,
    soh: float,
    mode_distance_km: Mapping[DriveMode, float],
) -> SohHistoryEntry | None:
    """Return a new SOH history sample once the odometer is 50 km past the last one."""
    last_odometer = snapshot.soh_history[-1].odometer if snapshot.soh_history else 0.0
    if odometer - last_odometer < SOH_SAMPLE_DISTANCE_KM:
        return None
    eco, city, sports = mode_mix(mode_distance_km)
    return SohHistoryEntry(
        odometer=odometer,
        cycle_count=cycles,
        avg_battery_temp=snapshot.battery_temp,
        soh=soh,
        eco_percent=eco,
        city_percent=city,
        sports_percent=sports,
    )
