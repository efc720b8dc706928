"""Partial state updates.

Every writer (tick, command, advisory merge, weather refresh) expresses its
change as a :class:`StateUpdate`. Only the state/store layer merges them.
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class UpdateSource(StrEnum):
    TICK = "tick"
    COMMAND = "command"
    ADVISORY = "advisory"
    WEATHER = "weather"


class StateUpdate(BaseModel):
    """A partial update to merge into the latest snapshot."""

    model_config = ConfigDict(frozen=True)

    source: UpdateSource
    observed_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    epoch: int | None = Field(
        default=None,
        description="Store epoch captured when the update was prepared; None applies unconditionally.",
    )
    data: dict[str, Any] = Field(default_factory=dict, description="Values merged by per-field rule")
    replace: dict[str, Any] = Field(default_factory=dict, description="Values that overwrite regardless of rule")

    @model_validator(mode="after")
    def _disjoint_keys(self) -> StateUpdate:
        overlap = set(self.data) & set(self.replace)
        if overlap:
            raise ValueError(f"fields both merged and replaced: {sorted(overlap)}")
        return self

    @property
    def fields(self) -> set[str]:
        return set(self.data) | set(self.replace)

    @property
    def is_empty(self) -> bool:
        return not self.data and not self.replace
