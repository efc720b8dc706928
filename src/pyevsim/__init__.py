"""pyevsim - Real-time EV dynamics and energy simulation core."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pyevsim")
except PackageNotFoundError:
    __version__ = "0+local"
from pyevsim._constants import DriveMode
from pyevsim.advisory import AdvisoryClient, AdvisoryScheduler, HttpAdvisoryTransport
from pyevsim.clock import SimulatedClock, TickClock, WallClock
from pyevsim.config import SimulationConfig, VehicleParameters
from pyevsim.exceptions import (
    AdvisoryError,
    AdvisoryResponseError,
    AdvisoryTransportError,
    EvSimConfigError,
    EvSimError,
    SimulationNotRunningError,
    StateUpdateError,
)
from pyevsim.models import (
    ChargingLog,
    ChargingState,
    CommandRejection,
    CommandResult,
    Notice,
    NoticeSeverity,
    PedalInput,
    Profile,
    TripSelector,
    VehicleSnapshot,
    WeatherReading,
)
from pyevsim.simulation import VehicleSimulation
from pyevsim.state.events import StateUpdate, UpdateSource
from pyevsim.state.store import SnapshotStore

__all__ = [
    "__version__",
    "AdvisoryClient",
    "AdvisoryError",
    "AdvisoryResponseError",
    "AdvisoryScheduler",
    "AdvisoryTransportError",
    "ChargingLog",
    "ChargingState",
    "CommandRejection",
    "CommandResult",
    "DriveMode",
    "EvSimConfigError",
    "EvSimError",
    "HttpAdvisoryTransport",
    "Notice",
    "NoticeSeverity",
    "PedalInput",
    "Profile",
    "SimulatedClock",
    "SimulationConfig",
    "SimulationNotRunningError",
    "SnapshotStore",
    "StateUpdate",
    "StateUpdateError",
    "TickClock",
    "TripSelector",
    "UpdateSource",
    "VehicleParameters",
    "VehicleSimulation",
    "VehicleSnapshot",
    "WallClock",
    "WeatherReading",
]
