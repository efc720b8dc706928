"""Command surface.

Each command inspects the latest snapshot and returns a
:class:`CommandOutcome`: the user-facing result plus the state update to
merge. Rejected commands carry no update, so the snapshot stays unchanged
and the notice is their only effect.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from pyevsim import charging
from pyevsim._constants import (
    AC_TEMP_MAX,
    AC_TEMP_MIN,
    DEFAULT_PROFILE_AC_TEMP,
    DEFAULT_PROFILE_DRIVE_MODE,
    DriveMode,
)
from pyevsim._normalize import clamp
from pyevsim.models.commands import CommandRejection, CommandResult, Notice, NoticeSeverity
from pyevsim.models.state import PedalInput, Profile, TripSelector, VehicleSnapshot
from pyevsim.state.events import StateUpdate, UpdateSource

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CommandOutcome:
    result: CommandResult
    update: StateUpdate | None = None
    advances_epoch: bool = False
    """Profile changes invalidate advisory calls already in flight."""


def _accepted(
    *,
    data: dict[str, Any] | None = None,
    replace: dict[str, Any] | None = None,
    notice: Notice | None = None,
    advances_epoch: bool = False,
) -> CommandOutcome:
    update = StateUpdate(source=UpdateSource.COMMAND, data=data or {}, replace=replace or {})
    return CommandOutcome(result=CommandResult.ok(notice), update=update, advances_epoch=advances_epoch)


def _rejected(rejection: CommandRejection, title: str, description: str = "") -> CommandOutcome:
    notice = Notice(title=title, description=description, severity=NoticeSeverity.DESTRUCTIVE)
    return CommandOutcome(result=CommandResult.rejected(rejection, notice))


def _profile_settings(profile: Profile) -> dict[str, Any]:
    return {"drive_mode": profile.drive_mode, "ac_temp": profile.ac_temp}


# ------------------------------------------------------------------
# Driving controls
# ------------------------------------------------------------------


def set_pedal(snapshot: VehicleSnapshot, pedal: PedalInput | str) -> CommandOutcome:
    return _accepted(replace={"pedal": PedalInput(pedal)})


def set_drive_mode(snapshot: VehicleSnapshot, mode: DriveMode | str) -> CommandOutcome:
    return _accepted(replace={"drive_mode": DriveMode(mode)})


def toggle_ac(snapshot: VehicleSnapshot) -> CommandOutcome:
    return _accepted(replace={"ac_on": not snapshot.ac_on})


def set_ac_temp(snapshot: VehicleSnapshot, celsius: float) -> CommandOutcome:
    return _accepted(replace={"ac_temp": clamp(float(celsius), AC_TEMP_MIN, AC_TEMP_MAX)})


def set_passengers(snapshot: VehicleSnapshot, count: int) -> CommandOutcome:
    return _accepted(replace={"passengers": max(0, int(count))})


def toggle_goods_in_boot(snapshot: VehicleSnapshot) -> CommandOutcome:
    return _accepted(replace={"goods_in_boot": not snapshot.goods_in_boot})


# ------------------------------------------------------------------
# Charging
# ------------------------------------------------------------------


def toggle_charging(snapshot: VehicleSnapshot, now: float) -> CommandOutcome:
    if snapshot.is_charging:
        transition = charging.stop_session(snapshot, now)
    else:
        transition = charging.start_session(snapshot, now)

    if not transition.accepted:
        return _rejected(
            CommandRejection.VEHICLE_MOVING,
            "Cannot start charging",
            "Vehicle must be stationary to start charging.",
        )
    return _accepted(data=transition.data, replace=transition.replace)


# ------------------------------------------------------------------
# Trips
# ------------------------------------------------------------------


def reset_trip(snapshot: VehicleSnapshot) -> CommandOutcome:
    field = "trip_a" if snapshot.active_trip == TripSelector.A else "trip_b"
    return _accepted(replace={field: 0.0})


def set_active_trip(snapshot: VehicleSnapshot, trip: TripSelector | str) -> CommandOutcome:
    return _accepted(replace={"active_trip": TripSelector(trip)})


# ------------------------------------------------------------------
# Profiles
# ------------------------------------------------------------------


def switch_profile(snapshot: VehicleSnapshot, name: str) -> CommandOutcome:
    profile = snapshot.profiles.get(name)
    if profile is None:
        return _rejected(CommandRejection.UNKNOWN_PROFILE, "Unknown profile", f"No profile named {name!r}.")
    _logger.info("Switching to profile %s", name)
    return _accepted(
        replace={"active_profile": name, **_profile_settings(profile)},
        notice=Notice(title=f"Switched to {name}'s profile."),
        advances_epoch=True,
    )


def add_profile(snapshot: VehicleSnapshot, name: str) -> CommandOutcome:
    name = name.strip()
    if not name:
        return _rejected(CommandRejection.EMPTY_NAME, "Profile name required")
    if name in snapshot.profiles:
        return _rejected(CommandRejection.DUPLICATE_PROFILE, "Profile exists", f"{name} is already a profile.")
    profiles = dict(snapshot.profiles)
    profiles[name] = Profile(drive_mode=DEFAULT_PROFILE_DRIVE_MODE, ac_temp=DEFAULT_PROFILE_AC_TEMP)
    return _accepted(replace={"profiles": profiles}, notice=Notice(title=f"Profile {name} added."))


def delete_profile(snapshot: VehicleSnapshot, name: str) -> CommandOutcome:
    if name not in snapshot.profiles:
        return _rejected(CommandRejection.UNKNOWN_PROFILE, "Unknown profile", f"No profile named {name!r}.")
    if len(snapshot.profiles) <= 1:
        return _rejected(CommandRejection.LAST_PROFILE, "Cannot delete profile", "At least one profile must remain.")

    profiles = {key: value for key, value in snapshot.profiles.items() if key != name}
    replace: dict[str, Any] = {"profiles": profiles}
    reassigned = snapshot.active_profile == name
    if reassigned:
        next_profile = next(iter(profiles))
        replace["active_profile"] = next_profile
        replace.update(_profile_settings(profiles[next_profile]))
        _logger.info("Deleted active profile %s; switching to %s", name, next_profile)
    return _accepted(
        replace=replace,
        notice=Notice(title=f"Profile {name} deleted."),
        advances_epoch=reassigned,
    )
