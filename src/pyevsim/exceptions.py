"""Custom exception hierarchy for pyevsim."""

from __future__ import annotations


class EvSimError(Exception):
    """Base exception for all pyevsim errors."""


class EvSimConfigError(EvSimError):
    """Invalid or missing configuration."""


class StateUpdateError(EvSimError):
    """A state update could not be merged (unknown field, broken invariant)."""


class SimulationNotRunningError(EvSimError):
    """Operation requires an open simulation (store closed or not started)."""


class AdvisoryError(EvSimError):
    """Base for failures talking to the external advisory service."""

    def __init__(self, message: str, *, endpoint: str = "") -> None:
        self.endpoint = endpoint
        super().__init__(message)


class AdvisoryTransportError(AdvisoryError):
    """HTTP-level failure (network, timeout, non-200, invalid JSON)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        super().__init__(message, endpoint=endpoint)


class AdvisoryResponseError(AdvisoryError):
    """Advisory service replied with a payload that does not match the schema."""
