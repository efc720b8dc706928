"""Charging state machine (idle <-> charging).

Starting a session requires a stationary vehicle. Closing a session always
produces exactly one log entry with a non-negative energy figure.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from pyevsim.models.state import ChargingLog, ChargingState, OpenChargeSession, VehicleSnapshot

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Transition:
    """Result of a charging transition request.

    ``data``/``replace`` are ready to be wrapped in a state update. A rejected
    transition carries neither.
    """

    accepted: bool
    state: ChargingState
    data: dict | None = None
    replace: dict | None = None
    log: ChargingLog | None = None


def charge_rate_percent_per_second(charge_rate_kw: float, nominal_capacity_kwh: float) -> float:
    if nominal_capacity_kwh <= 0:
        return 0.0
    return charge_rate_kw / nominal_capacity_kwh * 100.0 / 3600.0


def charge_step(soc: float, dt: float, *, charge_rate_kw: float, nominal_capacity_kwh: float) -> float:
    """SOC gained (percent) over *dt* seconds, never overshooting 100 %."""
    gain = charge_rate_percent_per_second(charge_rate_kw, nominal_capacity_kwh) * dt
    return max(0.0, min(100.0 - soc, gain))


def start_session(snapshot: VehicleSnapshot, now: float) -> Transition:
    if snapshot.is_charging:
        return Transition(accepted=False, state=ChargingState.CHARGING)
    if snapshot.speed > 0:
        return Transition(accepted=False, state=ChargingState.IDLE)

    session = OpenChargeSession(start_time=now, start_soc=snapshot.battery_soc)
    _logger.info("Charging session opened at SOC %.2f%%", snapshot.battery_soc)
    return Transition(
        accepted=True,
        state=ChargingState.CHARGING,
        replace={"is_charging": True, "last_charge_log": session, "power": 0.0},
    )


def stop_session(snapshot: VehicleSnapshot, now: float) -> Transition:
    session = snapshot.last_charge_log
    if not snapshot.is_charging or session is None:
        return Transition(accepted=False, state=ChargingState.IDLE)

    end_soc = snapshot.battery_soc
    energy_added = (end_soc - session.start_soc) / 100.0 * snapshot.pack_nominal_capacity_kwh
    if energy_added < 0:
        _logger.warning(
            "Charging session closed below its start SOC (%.2f%% -> %.2f%%); recording 0 kWh",
            session.start_soc,
            end_soc,
        )
        energy_added = 0.0

    log = ChargingLog(
        start_time=session.start_time,
        end_time=now,
        start_soc=session.start_soc,
        end_soc=end_soc,
        energy_added=energy_added,
    )
    _logger.info("Charging session closed: %.3f kWh added", energy_added)
    return Transition(
        accepted=True,
        state=ChargingState.IDLE,
        data={"charging_logs": [log]},
        replace={"is_charging": False, "last_charge_log": None, "power": 0.0},
        log=log,
    )
