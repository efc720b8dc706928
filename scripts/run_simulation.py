#!/usr/bin/env python3
"""Headless scripted drive.

Runs a fixed-step simulation through a short drive cycle (accelerate, cruise,
regen, brake, optional charge) and prints the final snapshot as JSON.

Usage:
    python scripts/run_simulation.py --mode City --accelerate 20 --cruise 120
    python scripts/run_simulation.py --charge 600 --json -o snapshot.json
    python scripts/run_simulation.py --advisory -v   # also query the advisory service once
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from pyevsim import DriveMode, SimulatedClock, SimulationConfig, VehicleSimulation  # noqa: E402


def _print_summary(sim: VehicleSimulation) -> None:
    snapshot = sim.snapshot
    print(f"Speed:        {snapshot.speed:.1f} km/h ({snapshot.drive_mode})")
    print(f"Odometer:     {snapshot.odometer:.3f} km (trip {snapshot.active_trip}: {snapshot.active_trip_distance:.3f} km)")
    print(f"SOC:          {snapshot.battery_soc:.3f} %")
    print(f"Range:        {snapshot.range_km:.1f} km at {snapshot.recent_wh_per_km:.1f} Wh/km")
    print(f"SOH:          {snapshot.pack_soh:.5f} % after {snapshot.equivalent_full_cycles:.5f} cycles")
    print(f"Eco score:    {snapshot.eco_score:.1f}")
    print(f"Harsh events: {snapshot.harsh_brake_events} braking / {snapshot.harsh_accel_events} acceleration")
    for log in snapshot.charging_logs:
        print(f"Charge log:   {log.start_soc:.2f} % -> {log.end_soc:.2f} % ({log.energy_added:.3f} kWh)")
    print(f"Advice:       {snapshot.driving_recommendation}")


async def main() -> None:
    parser = argparse.ArgumentParser(description="Run a scripted pyevsim drive cycle")
    parser.add_argument("--mode", choices=[mode.value for mode in DriveMode], default=DriveMode.ECO.value)
    parser.add_argument("--step", type=float, default=1.0, help="Tick length in seconds (default: 1.0)")
    parser.add_argument("--accelerate", type=float, default=30.0, help="Seconds on the accelerator")
    parser.add_argument("--cruise", type=float, default=60.0, help="Seconds coasting")
    parser.add_argument("--regen", type=float, default=5.0, help="Seconds of strong regen")
    parser.add_argument("--brake", type=float, default=30.0, help="Seconds on the brake")
    parser.add_argument("--charge", type=float, default=0.0, help="Seconds charging after the drive")
    parser.add_argument("--ac", action="store_true", help="Run with A/C on")
    parser.add_argument("--passengers", type=int, default=1)
    parser.add_argument("--advisory", action="store_true", help="Query the advisory service once at the end")
    parser.add_argument("--json", action="store_true", dest="json_mode", help="Output the snapshot as JSON")
    parser.add_argument("--output", "-o", help="Write JSON output to FILE instead of stdout")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    else:
        logging.basicConfig(level=logging.WARNING)

    config = SimulationConfig.from_env(advisory_enabled=args.advisory)
    clock = SimulatedClock(step=args.step)

    async with VehicleSimulation(config, clock=clock, on_notice=lambda n: print(f"! {n.title}", file=sys.stderr)) as sim:
        sim.set_drive_mode(args.mode)
        sim.set_passengers(args.passengers)
        if args.ac:
            sim.toggle_ac()

        for pedal, seconds in (
            ("accelerate", args.accelerate),
            ("neutral", args.cruise),
            ("regen", args.regen),
            ("brake", args.brake),
        ):
            sim.set_pedal(pedal)
            sim.run_for(seconds)

        if args.charge > 0:
            sim.set_pedal("neutral")
            if sim.toggle_charging().accepted:
                sim.run_for(args.charge)
                sim.toggle_charging()

        if sim.advisory is not None:
            merged = await sim.advisory.run_driving_advisory()
            logging.getLogger(__name__).info("Advisory merged fields: %s", sorted(merged))

        if args.json_mode or args.output:
            payload = json.dumps(sim.snapshot.to_payload(), indent=2, ensure_ascii=False)
            if args.output:
                Path(args.output).write_text(payload, encoding="utf-8")
                print(f"JSON written to {args.output}", file=sys.stderr)
            else:
                print(payload)
        else:
            _print_summary(sim)


if __name__ == "__main__":
    asyncio.run(main())
