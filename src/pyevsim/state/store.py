"""In-memory snapshot store.

This is the only component allowed to merge state updates. Every merge is
computed against the snapshot current at the moment of application, never
against a copy captured earlier.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from pyevsim.exceptions import StateUpdateError
from pyevsim.models.state import VehicleSnapshot
from pyevsim.state.events import StateUpdate
from pyevsim.state.policy import enforce_invariants, merge_value

_logger = logging.getLogger(__name__)

_SNAPSHOT_FIELDS = frozenset(VehicleSnapshot.model_fields)


class SnapshotStore:
    """Holds the single live :class:`VehicleSnapshot`.

    The epoch is a generation token. Writers whose result depends on when
    they started (advisory calls) capture it up front and tag their update
    with it; the store drops the update if the epoch moved in the meantime.
    """

    def __init__(self, initial: VehicleSnapshot | None = None) -> None:
        self._snapshot = self._seed(initial) if initial is not None else VehicleSnapshot.default()
        self._epoch = 0
        self._closed = False

    @staticmethod
    def _seed(initial: VehicleSnapshot) -> VehicleSnapshot:
        # model_copy(update=...) skips validation, so a seed may carry any value.
        fields: dict[str, Any] = {name: getattr(initial, name) for name in VehicleSnapshot.model_fields}
        enforce_invariants(None, fields)
        try:
            return VehicleSnapshot.model_validate(fields)
        except ValidationError as exc:
            raise StateUpdateError(f"Invalid initial snapshot: {exc}") from exc

    @property
    def snapshot(self) -> VehicleSnapshot:
        return self._snapshot

    @property
    def epoch(self) -> int:
        return self._epoch

    @property
    def closed(self) -> bool:
        return self._closed

    def advance_epoch(self) -> int:
        """Invalidate every epoch captured so far."""
        self._epoch += 1
        return self._epoch

    def is_current(self, epoch: int) -> bool:
        return not self._closed and epoch == self._epoch

    def close(self) -> None:
        self._closed = True
        self.advance_epoch()

    def apply(self, update: StateUpdate) -> VehicleSnapshot | None:
        """Merge *update* into the latest snapshot.

        Returns the new snapshot, or ``None`` when the update was discarded
        (store closed, or the update's epoch is stale).
        """
        if self._closed:
            _logger.debug("Discarding %s update: store closed", update.source)
            return None
        if update.epoch is not None and update.epoch != self._epoch:
            _logger.debug("Discarding stale %s update (epoch %s != %s)", update.source, update.epoch, self._epoch)
            return None

        unknown = update.fields - _SNAPSHOT_FIELDS
        if unknown:
            raise StateUpdateError(f"Unknown snapshot fields in {update.source} update: {sorted(unknown)}")
        if update.is_empty:
            return self._snapshot

        current = self._snapshot
        merged: dict[str, Any] = {name: getattr(current, name) for name in VehicleSnapshot.model_fields}
        for name, value in update.data.items():
            merged[name] = merge_value(name, merged[name], value)
        merged.update(update.replace)
        enforce_invariants(current, merged)

        try:
            snapshot = VehicleSnapshot.model_validate(merged)
        except ValidationError as exc:
            raise StateUpdateError(f"{update.source} update produced an invalid snapshot: {exc}") from exc

        self._snapshot = snapshot
        return snapshot
