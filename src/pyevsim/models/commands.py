"""Command outcome models."""

from __future__ import annotations

from enum import StrEnum

from pyevsim.models._base import EvSimModel


class NoticeSeverity(StrEnum):
    INFO = "info"
    DESTRUCTIVE = "destructive"


class CommandRejection(StrEnum):
    VEHICLE_MOVING = "vehicle_moving"
    UNKNOWN_PROFILE = "unknown_profile"
    DUPLICATE_PROFILE = "duplicate_profile"
    EMPTY_NAME = "empty_name"
    LAST_PROFILE = "last_profile"


class Notice(EvSimModel):
    """User-visible message produced by a command."""

    title: str
    description: str = ""
    severity: NoticeSeverity = NoticeSeverity.INFO


class CommandResult(EvSimModel):
    """Outcome of a command.

    A rejected command leaves the snapshot unchanged; ``notice`` is its only
    effect.
    """

    accepted: bool
    rejection: CommandRejection | None = None
    notice: Notice | None = None

    @classmethod
    def ok(cls, notice: Notice | None = None) -> CommandResult:
        return cls(accepted=True, notice=notice)

    @classmethod
    def rejected(cls, rejection: CommandRejection, notice: Notice | None = None) -> CommandResult:
        return cls(accepted=False, rejection=rejection, notice=notice)
